"""
CSV Transaction Importer

Turns a bank-style CSV export into transactions.

Format:
- First row is the header; names are trimmed and lower-cased
- Recognized columns: date, amount, description, category, type,
  recurring / isrecurring. Anything else is ignored
- Blank lines are skipped

Row rules:
- A row is kept only if `amount` starts with a number that is not zero;
  other rows are counted as skipped
- type is income only if the column says "income" (any case),
  otherwise expense
- amount is stored as its absolute value
- a blank or unknown category becomes "Other"
- a blank date becomes today
- descriptions longer than the model allows are cut to fit
- is_recurring only if recurring/isrecurring is the literal "true"

IMPORTANT: The whole file is parsed before anything is stored.
A malformed file raises CSVImportError and the ledger is left as it was.
"""

import csv
import io
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import IO, Optional, Union

import structlog
from dateutil import parser as date_parser
from pydantic import BaseModel, Field, ValidationError

from pocketbook.models.finance import (
    CATEGORIES_BY_TYPE,
    DESCRIPTION_MAX_LENGTH,
    Transaction,
    TransactionType,
    resolve_category,
)
from pocketbook.services.storage.repositories import TransactionStore


CSVSource = Union[str, Path, bytes, IO[str], IO[bytes]]

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

logger = structlog.get_logger(__name__)


class CSVImportError(Exception):
    """The file could not be read or parsed."""
    pass


class NoValidTransactionsError(CSVImportError):
    """The file parsed but contained no usable rows."""
    pass


class ImportResult(BaseModel):
    """Outcome of parsing one CSV file."""

    transactions: list[Transaction] = Field(default_factory=list)
    skipped_rows: int = Field(default=0, ge=0)

    @property
    def imported_count(self) -> int:
        return len(self.transactions)


def parse_amount(value: Optional[str]) -> Optional[Decimal]:
    """
    Read the number at the start of `value`.

    "12.50", " -7", "3.2e2 EUR" all parse; "abc" and "" give None.
    """
    if value is None:
        return None
    match = _LEADING_NUMBER.match(value)
    if not match:
        return None
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def parse_date(value: str) -> date:
    """
    Parse ISO dates first, then anything dateutil understands.

    Raises:
        ValueError: If the text is not a date
    """
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"unrecognized date '{value}'") from e


class CSVImporter:
    """
    Parses CSV files into transactions.
    """

    def __init__(self, max_bytes: Optional[int] = None):
        """
        Args:
            max_bytes: Reject inputs larger than this. None means no limit.
        """
        self._max_bytes = max_bytes

    def _read_text(self, source: CSVSource) -> str:
        try:
            if isinstance(source, (str, Path)):
                data = Path(source).read_bytes()
            elif isinstance(source, bytes):
                data = source
            else:
                data = source.read()
        except FileNotFoundError:
            raise CSVImportError(f"File not found: {source}")
        except OSError as e:
            raise CSVImportError(f"Could not read file: {e}") from e

        if isinstance(data, str):
            data = data.encode("utf-8")
        if self._max_bytes is not None and len(data) > self._max_bytes:
            raise CSVImportError(
                f"File is too large ({len(data)} bytes, limit {self._max_bytes})"
            )
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVImportError("File is not valid UTF-8 text") from e

    def parse(self, source: CSVSource, today: Optional[date] = None) -> ImportResult:
        """
        Parse a CSV file (path, bytes or open file).

        Raises:
            CSVImportError: If the file is missing, unreadable or malformed
        """
        return self.parse_text(self._read_text(source), today=today)

    def parse_text(self, text: str, today: Optional[date] = None) -> ImportResult:
        """Parse CSV content that is already in memory."""
        today = today or date.today()
        reader = csv.reader(io.StringIO(text), strict=True)

        try:
            header = next(reader, None)
            if header is None or not any(name.strip() for name in header):
                raise CSVImportError("CSV file has no header row")
            headers = [name.strip().lower() for name in header]

            transactions: list[Transaction] = []
            skipped = 0
            for values in reader:
                if not any(value.strip() for value in values):
                    continue
                row = dict(zip(headers, values))
                transaction = self._row_to_transaction(row, reader.line_num, today)
                if transaction is None:
                    skipped += 1
                else:
                    transactions.append(transaction)
        except csv.Error as e:
            raise CSVImportError(f"Malformed CSV near line {reader.line_num}: {e}") from e

        logger.info(
            "csv_parsed",
            imported=len(transactions),
            skipped_rows=skipped,
        )
        return ImportResult(transactions=transactions, skipped_rows=skipped)

    def _row_to_transaction(
        self,
        row: dict[str, str],
        line_num: int,
        today: date,
    ) -> Optional[Transaction]:
        amount = parse_amount(row.get("amount"))
        if amount is None or not amount.is_finite() or amount == 0:
            return None

        raw_type = (row.get("type") or "").strip().lower()
        transaction_type = (
            TransactionType.INCOME if raw_type == "income" else TransactionType.EXPENSE
        )

        raw_category = (row.get("category") or "").strip() or "Other"
        try:
            category = resolve_category(transaction_type, raw_category)
        except ValueError:
            logger.warning(
                "csv_unknown_category",
                line=line_num,
                category=raw_category,
                type=transaction_type.value,
            )
            category = CATEGORIES_BY_TYPE[transaction_type]("Other")

        description = (row.get("description") or "").strip()[:DESCRIPTION_MAX_LENGTH]

        raw_date = (row.get("date") or "").strip()
        try:
            transaction_date = parse_date(raw_date) if raw_date else today
        except ValueError as e:
            raise CSVImportError(f"Line {line_num}: {e}") from e

        try:
            return Transaction(
                type=transaction_type,
                amount=abs(amount),
                category=category,
                date=transaction_date,
                description=description,
                is_recurring=row.get("recurring") == "true" or row.get("isrecurring") == "true",
            )
        except ValidationError as e:
            raise CSVImportError(f"Line {line_num}: {e.errors()[0]['msg']}") from e

    def import_into(
        self,
        store: TransactionStore,
        source: CSVSource,
        today: Optional[date] = None,
    ) -> ImportResult:
        """
        Parse `source` and append its transactions to `store`.

        Raises:
            CSVImportError: If parsing fails (nothing is stored)
            NoValidTransactionsError: If no row had a usable amount
        """
        result = self.parse(source, today=today)
        if not result.transactions:
            raise NoValidTransactionsError("No valid transactions found in the CSV file")
        store.add_many(result.transactions)
        return result
