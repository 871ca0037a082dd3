"""JSON file transcript store.

Keeps a small key-value map in one JSON file, the desktop counterpart of a
browser's local storage.
"""

import json
import os
from pathlib import Path

from .base import TRANSCRIPT_KEY, PersistenceParseError, TranscriptStore


class FileTranscriptStore(TranscriptStore):
    """File-backed transcript store.

    The file holds a JSON object mapping storage keys to snapshot strings.
    Writes go to a temporary file that replaces the original, so a crash
    never leaves a half-written file behind.
    """

    def __init__(
        self,
        path: str | Path = "~/.finbot/transcript.json",
        key: str = TRANSCRIPT_KEY,
    ):
        super().__init__(key)
        self._path = Path(path).expanduser()

    async def connect(self) -> None:
        """Ensure the parent directory exists."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

    async def disconnect(self) -> None:
        """Nothing to release; every operation opens and closes the file."""

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise PersistenceParseError(f"{self._path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceParseError(f"{self._path} does not hold a key-value object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)

    async def _read(self, key: str) -> str | None:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise PersistenceParseError(f"Value under '{key}' is not a string")
        return value

    async def _write(self, key: str, blob: str) -> None:
        try:
            data = self._read_all()
        except PersistenceParseError as e:
            self._debug("warning", f"Overwriting unreadable store file: {e}")
            data = {}
        data[key] = blob
        self._write_all(data)

    async def _delete(self, key: str) -> None:
        try:
            data = self._read_all()
        except PersistenceParseError:
            data = {}
        data.pop(key, None)
        self._write_all(data)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backend_type(self) -> str:
        return "file"
