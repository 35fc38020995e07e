"""
JSON File Storage Implementation

DESIGN DECISION: Each key is one JSON file in the data directory because:
1. Users can open and back up their data with any text editor
2. No database setup required
3. A write replaces the whole record, matching how the stores work

TRADEOFFS:
- Not suitable for large histories (we're fine for personal use)
- One writer at a time (a single local user)

Writes go to a temporary file first and are moved into place, so a
crash mid-write never leaves a half-written record behind.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import structlog

from pocketbook.models.audit import AuditEvent
from pocketbook.services.storage.interface import (
    AuditStorageInterface,
    KeyValueBackend,
    StorageError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")
_SUFFIX = ".json"

logger = structlog.get_logger(__name__)


class JsonFileBackend(KeyValueBackend):
    """
    File-per-key implementation of the key/value backend.

    The directory is created on first write.
    """

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{_SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.debug("storage_write", key=key, bytes=len(value))

    def remove_item(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}") from e

    def keys(self) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        return sorted(p.stem for p in self._data_dir.glob(f"*{_SUFFIX}"))


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit trail, one JSON object per line.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    def append_event(self, event: AuditEvent) -> bool:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fp:
            fp.write(event.to_json_line() + "\n")
        return True

    def get_recent_events(self, limit: int = 100) -> list[dict]:
        if not self._path.exists():
            return []
        events = []
        with self._path.open("r", encoding="utf-8") as fp:
            for line in fp:
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning("audit_line_unreadable", path=str(self._path))
        return list(reversed(events[-limit:]))
