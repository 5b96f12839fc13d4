"""Cancellable handles around in-flight API requests."""

import asyncio
import logging
from typing import Any, Awaitable, List, Optional, TypeVar, Generic

logger = logging.getLogger(__name__)

T = TypeVar('T')

class RequestHandle(Generic[T]):
    """
    A request running as its own task.

    Cancelling a handle is how a view that goes away abandons its request;
    awaiting the result of a cancelled handle yields the default value
    instead of raising.

    Example:
        handle = RequestHandle(client.get_events(), name='dashboard')
        ...
        handle.cancel()
        events = await handle.result(default=[])
    """

    def __init__(self, awaitable: Awaitable[T], name: Optional[str] = None):
        self.name = name or 'request'
        self._task = asyncio.ensure_future(awaitable)

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def cancelled(self) -> bool:
        return self._task.cancelled()

    def cancel(self) -> bool:
        """Cancel the request. Returns False if it had already finished."""
        if self._task.done():
            return False
        logger.debug(f"Cancelling {self.name}")
        return self._task.cancel()

    async def result(self, default: Any = None) -> T:
        """
        Wait for the request to finish.

        Errors raised by the request propagate. A cancelled request gives
        `default`, unless the caller itself is being cancelled.
        """
        try:
            return await self._task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            if self._task.cancelled():
                return default
            raise

class RequestGroup:
    """Handles owned by one view or session, cancelled together on teardown."""

    def __init__(self):
        self._handles: List[RequestHandle] = []

    def start(self, awaitable: Awaitable[T], name: Optional[str] = None) -> RequestHandle[T]:
        self._handles = [handle for handle in self._handles if not handle.done]
        handle = RequestHandle(awaitable, name=name)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._handles if not handle.done)

    def cancel_all(self) -> int:
        """Cancel every pending handle and return how many were cancelled."""
        cancelled = sum(1 for handle in self._handles if handle.cancel())
        self._handles = []
        return cancelled
