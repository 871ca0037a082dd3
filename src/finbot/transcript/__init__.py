"""Transcript persistence module for finbot.

Saves the chat transcript after every change and restores it on start-up.
"""

from .base import (
    SCHEMA_VERSION,
    TRANSCRIPT_KEY,
    PersistenceParseError,
    TranscriptStore,
    decode_transcript,
    encode_transcript,
)
from .factory import create_transcript_store
from .file import FileTranscriptStore
from .in_memory import InMemoryTranscriptStore

__all__ = [
    "SCHEMA_VERSION",
    "TRANSCRIPT_KEY",
    "FileTranscriptStore",
    "InMemoryTranscriptStore",
    "PersistenceParseError",
    "TranscriptStore",
    "create_transcript_store",
    "decode_transcript",
    "encode_transcript",
]
