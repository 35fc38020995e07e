"""In-memory storage backends, used by tests and throwaway sessions."""

from typing import Optional

from pocketbook.models.audit import AuditEvent
from pocketbook.services.storage.interface import (
    AuditStorageInterface,
    KeyValueBackend,
)


class InMemoryBackend(KeyValueBackend):
    """Dict-backed key/value store. Lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._items)


class InMemoryAuditStorage(AuditStorageInterface):
    """Keeps audit events in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[dict]:
        return [event.to_log_dict() for event in reversed(self.events[-limit:])]
