"""Routes package initialization."""

from .auth import auth_bp
from .events import events_bp

__all__ = ['auth_bp', 'events_bp']
