"""In-memory transcript store.

Simple dict-based storage for session-only transcripts.
Data is lost when the application exits.
"""

from .base import TRANSCRIPT_KEY, TranscriptStore


class InMemoryTranscriptStore(TranscriptStore):
    """In-memory transcript store (session-only).

    Blobs are kept as serialized strings so loading goes through the same
    parsing path as the persistent backends. Suitable for testing.
    """

    def __init__(self, key: str = TRANSCRIPT_KEY, blobs: dict[str, str] | None = None):
        super().__init__(key)
        self._blobs: dict[str, str] = blobs if blobs is not None else {}

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""

    async def _read(self, key: str) -> str | None:
        return self._blobs.get(key)

    async def _write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    async def _delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    @property
    def blobs(self) -> dict[str, str]:
        """Raw stored blobs, keyed by storage key."""
        return self._blobs

    @property
    def backend_type(self) -> str:
        return "memory"
