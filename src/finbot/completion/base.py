from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .errors import EmptyInput


class CompletionClient(ABC):
    """Abstract base class for completion clients.

    This module hides the design decision of where replies come from.
    Implementations must handle:
    - Transport setup (HTTP endpoint or in-process model provider)
    - Mapping transport and service failures onto the error taxonomy

    Every call is a single attempt; there is no retry.
    Trace output goes to the callback set with ``set_debug_callback``
    under the "Completion" component.

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            reply = await client.complete("Should I invest now?")
    """

    _debug_callback: Callable[[str, str, str], None] | None = None

    def set_debug_callback(self, callback: Callable[[str, str, str], None] | None) -> None:
        """Set the callback receiving (level, component, message) log entries."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Completion", message)

    async def complete(self, user_text: str) -> str:
        """Get a reply for one user utterance.

        Args:
            user_text: Raw user text

        Returns:
            The reply text (may be empty if the service produced nothing)

        Raises:
            EmptyInput: If user_text is blank
            TransportError: If the service could not be reached
            UpstreamError: If the service failed or returned an unusable payload
        """
        if not user_text or not user_text.strip():
            raise EmptyInput("Message is required.")
        return await self._complete(user_text)

    @abstractmethod
    async def _complete(self, user_text: str) -> str:
        """Send a non-blank utterance and return the reply text."""

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    @property
    @abstractmethod
    def client_type(self) -> str:
        """Get the client type identifier."""

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
