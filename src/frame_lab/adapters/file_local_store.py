"""JSON-file-backed local store."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from frame_lab.services.local_store import LocalStore

logger = logging.getLogger(__name__)


@dataclass
class JsonFileLocalStore(LocalStore):
    """Local store persisted as one JSON object on disk."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        values = self._read()
        values[key] = value
        self._write(values)

    def remove(self, key: str) -> None:
        """Delete a key if present."""
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable local store at %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _write(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(values), encoding="utf-8")
        temp_path.replace(self.path)
