"""Models package initialization."""

from .user import UserSummary, Session, EMPTY_SESSION
from .event import CATEGORIES, Comment, EventRecord, EventDraft

__all__ = ['UserSummary', 'Session', 'EMPTY_SESSION', 'CATEGORIES', 'Comment', 'EventRecord', 'EventDraft']
