"""CSV import package."""

from pocketbook.services.importer.csv_importer import (
    CSVImporter,
    CSVImportError,
    ImportResult,
    NoValidTransactionsError,
    parse_amount,
    parse_date,
)

__all__ = [
    "CSVImporter",
    "CSVImportError",
    "ImportResult",
    "NoValidTransactionsError",
    "parse_amount",
    "parse_date",
]
