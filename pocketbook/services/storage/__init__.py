"""
Storage Services Package

Provides the key/value backend interface, a JSON-file and an in-memory
implementation, and the per-user stores built on top of them.
"""

from pocketbook.services.storage.interface import (
    AuditStorageInterface,
    KeyValueBackend,
    NotFoundError,
    StorageError,
)
from pocketbook.services.storage.json_file import (
    JsonFileBackend,
    JsonLinesAuditStorage,
)
from pocketbook.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBackend,
)
from pocketbook.services.storage.repositories import (
    BudgetStore,
    InvestmentStore,
    TransactionStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueBackend",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # Backends
    "InMemoryAuditStorage",
    "InMemoryBackend",
    "JsonFileBackend",
    "JsonLinesAuditStorage",
    # Stores
    "BudgetStore",
    "InvestmentStore",
    "TransactionStore",
]
