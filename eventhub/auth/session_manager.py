"""Session management for the current user.

The session manager is the single source of truth for who is logged in.
It owns the credential store, keeps the API client's bearer credential in
step with it, and publishes immutable Session snapshots to views.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..api.client import EventAPIClient
from ..errors import EventHubError
from ..models.user import EMPTY_SESSION, Session, UserSummary
from ..utils.cancellation import RequestGroup, RequestHandle
from .storage import CredentialStore

logger = logging.getLogger(__name__)

class SessionManager:
    """
    Login, registration, logout and silent session restore.

    Args:
        client: API client whose credential this manager controls
        store: Durable storage for the credential
    """

    def __init__(self, client: EventAPIClient, store: CredentialStore):
        self.client = client
        self.store = store
        self._session = EMPTY_SESSION
        self._loading = False
        self._requests = RequestGroup()

    @property
    def session(self) -> Session:
        """The current session (immutable snapshot)."""
        return self._session

    @property
    def current_user(self) -> Optional[UserSummary]:
        return self._session.user

    @property
    def loading(self) -> bool:
        """True while a restore is in flight; the session is unknown until it clears."""
        return self._loading

    def _publish(self, token: str, user: UserSummary) -> Session:
        self.store.save(token)
        self.client.credential = token
        self._session = Session(user=user, credential=token)
        return self._session

    async def login(self, email: str, password: str) -> Session:
        """
        Log in with email and password.

        Raises:
            AuthError: If the credentials are rejected
            NetworkError: If the API cannot be reached
        """
        token, user = await self.client.login(email, password)
        logger.info(f"User {user.email or user.id} logged in")
        return self._publish(token, user)

    async def register(self, fields: Dict[str, Any]) -> Session:
        """
        Create an account and log in as it.

        Raises:
            AuthError: If the API refuses the registration
            NetworkError: If the API cannot be reached
        """
        token, user = await self.client.register(fields)
        logger.info(f"User {user.email or user.id} registered")
        return self._publish(token, user)

    def _forget(self) -> None:
        try:
            self.store.clear()
        except OSError as e:
            logger.warning(f"Could not remove stored credential: {e}")
        self.client.credential = None
        self._session = EMPTY_SESSION

    def _superseded(self, token: str) -> bool:
        if self.store.load() == token:
            return False
        logger.debug("Stored credential changed during restore, keeping the newer session")
        return True

    def logout(self) -> None:
        """Forget the credential and the user. Never raises."""
        self._forget()
        logger.info("Logged out")

    async def restore_session(self) -> Optional[Session]:
        """
        Re-derive the user from a previously stored credential.

        A missing, expired or unverifiable credential leaves the session
        empty and is removed from storage; nothing is raised. Cancellation
        leaves the stored credential in place.
        """
        self._loading = True
        try:
            token = self.store.load()
            if not token:
                return None

            self.client.credential = token
            try:
                user = await self.client.get_current_user()
            except EventHubError as e:
                if self._superseded(token):
                    return None
                logger.info(f"Discarding stored credential: {e}")
                self._forget()
                return None
            except asyncio.CancelledError:
                if self.client.credential == token and self._session.credential != token:
                    self.client.credential = None
                raise

            # A login or logout that finished meanwhile wins
            if self._superseded(token):
                return None

            self._session = Session(user=user, credential=token)
            logger.debug(f"Restored session for {user.email or user.id}")
            return self._session
        finally:
            self._loading = False

    def begin_restore(self) -> RequestHandle[Optional[Session]]:
        """Start restore_session in the background and return its handle."""
        self._loading = True
        return self._requests.start(self.restore_session(), name='restore session')

    def close(self) -> None:
        """Cancel any request still in flight."""
        cancelled = self._requests.cancel_all()
        self._loading = False
        if cancelled:
            logger.debug(f"Cancelled {cancelled} pending session request(s)")
