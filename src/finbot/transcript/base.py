"""Abstract base class for transcript stores.

This module defines the interface for persisting the chat transcript.
The abstraction hides:
- Snapshot format (versioned JSON envelope)
- Persistence mechanism (process memory, JSON file, SQLite)
- Connection management

Every backend is a key-value blob store; the transcript lives under one
fixed key and every save overwrites the previous snapshot.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from pydantic import TypeAdapter, ValidationError

from ..chat.models import Message

TRANSCRIPT_KEY = "finbot.chat.messages"
SCHEMA_VERSION = 1

DebugCallback = Callable[[str, str, str], None]

_messages_adapter = TypeAdapter(list[Message])


class PersistenceParseError(Exception):
    """A stored snapshot could not be turned back into messages."""


def encode_transcript(messages: Sequence[Message]) -> str:
    """Serialize a transcript into a versioned JSON snapshot."""
    return json.dumps({
        "version": SCHEMA_VERSION,
        "messages": [m.model_dump(mode="json") for m in messages],
    })


def decode_transcript(blob: str) -> list[Message]:
    """Parse a stored snapshot.

    Accepts the versioned envelope and the older bare JSON array.

    Raises:
        PersistenceParseError: If the blob is not valid JSON, has an unknown
            version, or its messages do not validate
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise PersistenceParseError(f"Snapshot is not valid JSON: {e}") from e

    if isinstance(data, dict):
        version = data.get("version")
        if version != SCHEMA_VERSION:
            raise PersistenceParseError(f"Unsupported snapshot version: {version!r}")
        data = data.get("messages")

    if not isinstance(data, list):
        raise PersistenceParseError("Snapshot does not hold a message list")

    try:
        return _messages_adapter.validate_python(data)
    except ValidationError as e:
        raise PersistenceParseError(f"Snapshot holds invalid messages: {e}") from e


class TranscriptStore(ABC):
    """Abstract transcript store.

    Subclasses implement raw blob access; snapshot encoding, decoding and
    recovery from malformed data live here.
    """

    def __init__(self, key: str = TRANSCRIPT_KEY):
        self._key = key
        self._debug_callback: DebugCallback | None = None

    @property
    def key(self) -> str:
        return self._key

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the callback receiving (level, component, message) log entries."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Store", message)

    async def load(self) -> list[Message] | None:
        """Restore the last saved transcript.

        Returns:
            The saved messages, or None when nothing usable is stored
        """
        try:
            blob = await self._read(self._key)
            if blob is None:
                self._debug("debug", f"No transcript stored under '{self._key}'")
                return None
            messages = decode_transcript(blob)
        except PersistenceParseError as e:
            self._debug("warning", f"Discarding stored transcript: {e}")
            return None

        self._debug("info", f"Loaded {len(messages)} message(s) from {self.backend_type}")
        return messages

    async def save(self, messages: Sequence[Message]) -> None:
        """Overwrite the stored transcript with ``messages``."""
        await self._write(self._key, encode_transcript(messages))

    async def clear(self) -> None:
        """Remove the stored transcript."""
        await self._delete(self._key)

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def _read(self, key: str) -> str | None:
        """Return the blob stored under ``key``, or None."""

    @abstractmethod
    async def _write(self, key: str, blob: str) -> None:
        """Store ``blob`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
