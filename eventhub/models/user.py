"""User and session models."""

from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class UserSummary:
    """
    The public projection of an account as returned by the API.

    Fields:
        id: Account identifier (the API's `_id`), always compared as a string
        name: Display name (optional, attendee lists are not always populated)
        email: Email address (optional)
    """
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def initial(self) -> str:
        """First letter of the display name, used as an avatar placeholder."""
        return self.name[0].upper() if self.name else '?'

@dataclass(frozen=True)
class Session:
    """
    Snapshot of the authentication state.

    The session manager only publishes snapshots where the credential and the
    user are both present or both absent.
    """
    user: Optional[UserSummary] = None
    credential: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.credential is not None

EMPTY_SESSION = Session()
