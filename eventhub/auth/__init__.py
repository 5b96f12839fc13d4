"""Authentication package initialization."""

from .session_manager import SessionManager
from .storage import (
    CredentialStore,
    MemoryCredentialStore,
    FileCredentialStore,
    FlaskSessionCredentialStore
)

__all__ = [
    'SessionManager',
    'CredentialStore',
    'MemoryCredentialStore',
    'FileCredentialStore',
    'FlaskSessionCredentialStore'
]
