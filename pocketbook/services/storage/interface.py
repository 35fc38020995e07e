"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a flat key/value store of strings.
Each (user scope, data kind) pair owns exactly one key whose value is
the whole serialized record list. This allows us to:
1. Keep the stores trivially simple (read all, write all)
2. Use an in-memory backend for testing
3. Swap the JSON file backend for something else later

The interface is intentionally tiny - no queries, no partial updates.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pocketbook.models.audit import AuditEvent


class KeyValueBackend(ABC):
    """
    Abstract interface for key/value persistence.

    Values are opaque strings (serialized JSON in practice).
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key was never written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageError: If the write fails (previous value is kept)
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""
        pass


class AuditStorageInterface(ABC):
    """Append-only home of the audit trail."""

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """Add one event at the end of the trail."""

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[dict]:
        """Up to `limit` events as log dicts, newest first."""


class StorageError(Exception):
    """A backend could not be read or written, or held unreadable data."""


class NotFoundError(StorageError):
    """No stored record has the requested id."""
