# workshop/core/extras_store.py
"""Device-local key-value storage for ticket fields the record store lacks.

Entries are kept under ``ticket_extras_<id>`` as JSON objects. With a path the
whole map is persisted to a single JSON file on every write, otherwise it
lives in memory for the life of the process.

Request handlers run in FastAPI's threadpool, so every read and write of the
map goes through one lock, and each flush writes its own temp file before
swapping it into place.
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

KEY_PREFIX = "ticket_extras_"


def extras_key(ticket_id: str) -> str:
    return f"{KEY_PREFIX}{ticket_id}"


class ExtrasStore:
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else None
        self._lock = threading.RLock()
        self._items: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Extras file %s is not valid JSON, starting empty", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        # caller holds self._lock
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=self.path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(self._items, tmp, ensure_ascii=False)
        try:
            os.replace(tmp.name, self.path)
        except OSError:
            os.unlink(tmp.name)
            raise

    def get(self, ticket_id: str) -> dict[str, Any]:
        with self._lock:
            raw = self._items.get(extras_key(ticket_id))
        if raw is None:
            return {}
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Extras entry for ticket %s is corrupt, ignoring it", ticket_id)
            return {}
        return value if isinstance(value, dict) else {}

    def set(self, ticket_id: str, extras: dict[str, Any]) -> None:
        raw = json.dumps(extras, ensure_ascii=False)
        with self._lock:
            self._items[extras_key(ticket_id)] = raw
            self._flush()

    def merge(self, ticket_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Update only the supplied fields of the entry, leaving the rest as stored."""
        with self._lock:
            entry = self.get(ticket_id)
            entry.update(fields)
            self.set(ticket_id, entry)
        return entry

    def delete(self, ticket_id: str) -> None:
        with self._lock:
            if self._items.pop(extras_key(ticket_id), None) is not None:
                self._flush()

    def keys(self, prefix: str = KEY_PREFIX) -> list[str]:
        with self._lock:
            return [key for key in self._items if key.startswith(prefix)]

    def ids(self) -> list[str]:
        return [key[len(KEY_PREFIX):] for key in self.keys()]
