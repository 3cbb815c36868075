import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String-keyed store of JSON-serializable values."""

    def get_item(self, key: str):
        raise NotImplementedError

    def set_item(self, key: str, value) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: dict = None):
        self._data = {k: json.dumps(v) for k, v in (initial or {}).items()}

    def get_item(self, key: str):
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set_item(self, key: str, value) -> None:
        self._data[key] = json.dumps(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


# Purpose: Persist a key-value map as one JSON document on disk.
# Reads re-load the file each time so separate processes (foreground pipeline and
# background monitor) see each other's writes. Each write goes to its own temp file in
# the same directory, which then replaces the document atomically.
# Raises:
# - OSError on I/O failure, ValueError when the document is not valid JSON.
class JsonFileStore(KeyValueStore):
    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # one temp file per write; concurrent writers never share it
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name + ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except Exception:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get_item(self, key: str):
        return self._load().get(key)

    def set_item(self, key: str, value) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._write(data)
