"""
Per-User Stores

Each store owns one key of the backend for one session:
the whole record list is read on load and written back on every change.
There is exactly one writer (the local user), so no locking is needed.
"""

from decimal import Decimal
from typing import ClassVar, Generic, Iterable, Optional, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError

from pocketbook.models.finance import Budget, DataKind, Investment, Transaction
from pocketbook.services.storage.interface import (
    KeyValueBackend,
    NotFoundError,
    StorageError,
)
from pocketbook.session import Session


RecordT = TypeVar("RecordT", bound=BaseModel)
RecordId = Union[UUID, str]


def _as_uuid(record_id: RecordId) -> Optional[UUID]:
    """The id as a UUID, or None when the text is not one (it can match nothing)."""
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        return None


class _RecordStore(Generic[RecordT]):
    """Ordered list of records kept under one storage key."""

    kind: ClassVar[DataKind]
    _adapter: ClassVar[TypeAdapter]

    def __init__(self, backend: KeyValueBackend, session: Session):
        self._backend = backend
        self._session = session

    @property
    def key(self) -> str:
        return self._session.storage_key(self.kind)

    def load(self) -> list[RecordT]:
        """Read all records (empty list if nothing stored yet)."""
        raw = self._backend.get_item(self.key)
        if raw is None:
            return []
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageError(
                f"Stored {self.kind.value} for '{self._session.scope}' are unreadable: "
                f"{e.error_count()} validation errors"
            ) from e

    def save(self, records: Iterable[RecordT]) -> None:
        """Replace the stored list with `records`."""
        payload = self._adapter.dump_json(list(records))
        self._backend.set_item(self.key, payload.decode("utf-8"))

    def add(self, record: RecordT) -> list[RecordT]:
        return self.add_many([record])

    def add_many(self, records: Iterable[RecordT]) -> list[RecordT]:
        """Append records after the existing ones and persist."""
        updated = self.load() + list(records)
        self.save(updated)
        return updated

    def get(self, record_id: RecordId) -> Optional[RecordT]:
        wanted = _as_uuid(record_id)
        if wanted is None:
            return None
        for record in self.load():
            if record.id == wanted:
                return record
        return None

    def delete(self, record_id: RecordId) -> bool:
        """
        Remove the record with this id.

        Returns:
            True if a record was removed; the others keep their order
        """
        wanted = _as_uuid(record_id)
        if wanted is None:
            return False
        records = self.load()
        for index, record in enumerate(records):
            if record.id == wanted:
                del records[index]
                self.save(records)
                return True
        return False


class TransactionStore(_RecordStore[Transaction]):
    """The session's transactions, in insertion order."""

    kind = DataKind.TRANSACTIONS
    _adapter = TypeAdapter(list[Transaction])


class InvestmentStore(_RecordStore[Investment]):
    """The session's investment positions."""

    kind = DataKind.INVESTMENTS
    _adapter = TypeAdapter(list[Investment])

    def update_value(self, record_id: RecordId, current_value: Decimal) -> Investment:
        """
        Set the current value of one investment.

        Raises:
            NotFoundError: If no investment has this id
        """
        wanted = _as_uuid(record_id)
        if wanted is None:
            raise NotFoundError(f"Investment not found: {record_id}")
        investments = self.load()
        for index, investment in enumerate(investments):
            if investment.id == wanted:
                updated = investment.model_copy(update={"current_value": Decimal(current_value)})
                # Re-validate so a negative value is still rejected
                updated = Investment.model_validate(updated.model_dump())
                investments[index] = updated
                self.save(investments)
                return updated
        raise NotFoundError(f"Investment not found: {wanted}")


class BudgetStore:
    """The session's budget, replaced as a whole on every edit."""

    kind = DataKind.BUDGET

    def __init__(
        self,
        backend: KeyValueBackend,
        session: Session,
        default_monthly_limit: Decimal = Decimal("1000"),
    ):
        self._backend = backend
        self._session = session
        self._default_monthly_limit = default_monthly_limit

    @property
    def key(self) -> str:
        return self._session.storage_key(self.kind)

    def load(self) -> Budget:
        raw = self._backend.get_item(self.key)
        if raw is None:
            return Budget(monthly_limit=self._default_monthly_limit)
        try:
            return Budget.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(
                f"Stored budget for '{self._session.scope}' is unreadable"
            ) from e

    def save(self, budget: Budget) -> None:
        self._backend.set_item(self.key, budget.model_dump_json())
