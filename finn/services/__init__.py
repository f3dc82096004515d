"""Services package."""

from finn.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    JsonFileLedgerStorage,
    LedgerCorruptedError,
    LedgerStorageInterface,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "JsonFileLedgerStorage",
    "LedgerCorruptedError",
    "LedgerStorageInterface",
    "StorageConnectionError",
    "StorageError",
]
