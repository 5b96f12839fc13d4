"""Durable storage for the bearer credential."""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

class CredentialStore(ABC):
    """
    Base interface for credential storage.

    The session manager is the only reader and writer of a store; views read
    the session it publishes, never the store itself.
    """

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the persisted credential, or None if there is none."""
        pass

    @abstractmethod
    def save(self, token: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

class MemoryCredentialStore(CredentialStore):
    """Keeps the credential in memory for the lifetime of the object."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None

class FileCredentialStore(CredentialStore):
    """Persists the credential as JSON in a file readable only by its owner."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return None
        token = data.get('token') if isinstance(data, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({'token': token}), encoding='utf-8')
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

class FlaskSessionCredentialStore(CredentialStore):
    """Keeps the credential in the signed cookie session of the current Flask request."""

    def __init__(self, key: str = 'token'):
        self.key = key

    def load(self) -> Optional[str]:
        from flask import session
        return session.get(self.key)

    def save(self, token: str) -> None:
        from flask import session
        session[self.key] = token

    def clear(self) -> None:
        from flask import session
        session.pop(self.key, None)
