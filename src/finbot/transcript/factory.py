"""Factory for creating transcript stores."""

from typing import Any

from .base import TranscriptStore


def create_transcript_store(
    backend: str = "file",
    **kwargs: Any
) -> TranscriptStore:
    """Create a transcript store.

    Args:
        backend: Backend type ("memory", "file" or "sqlite")
        **kwargs: Backend-specific configuration (``path``, ``key``)

    Returns:
        TranscriptStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryTranscriptStore
        return InMemoryTranscriptStore(**kwargs)

    elif backend == "file":
        from .file import FileTranscriptStore
        return FileTranscriptStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteTranscriptStore
        return SQLiteTranscriptStore(**kwargs)

    raise ValueError(
        f"Unsupported transcript backend: {backend}. "
        f"Supported backends: memory, file, sqlite"
    )
