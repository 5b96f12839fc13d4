"""API client package initialization."""

from .client import EventAPIClient

__all__ = ['EventAPIClient']
