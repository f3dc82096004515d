"""
Storage Services Package

Provides the abstract ledger storage interface and its implementations.
The JSON file backend is the default; Google Sheets is optional.
"""

from finn.services.storage.interface import (
    LedgerCorruptedError,
    LedgerStorageInterface,
    StorageConnectionError,
    StorageError,
)
from finn.services.storage.json_file import JsonFileLedgerStorage
from finn.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "LedgerCorruptedError",
    "StorageConnectionError",
    "StorageError",
    # JSON file implementation
    "JsonFileLedgerStorage",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
]
