"""Configuration package initialization."""

from .environment import IS_PRODUCTION_ENVIRONMENT
from .settings import Config, TestingConfig

__all__ = ['IS_PRODUCTION_ENVIRONMENT', 'Config', 'TestingConfig']
