"""
Abstract Storage Interface

DESIGN DECISION: The ledger core never touches storage. It works on a
Ledger value; a storage backend turns that value into bytes and back.
This allows us to:
1. Keep the plain JSON ledger file as the default
2. Offer Google Sheets for people who want to see their ledger in a sheet
3. Use in-memory storage for testing

The interface is whole-ledger: load everything, save everything. There are
no partial updates.
"""

from abc import ABC, abstractmethod

from finn.models.ledger import Ledger


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human readable description of where the ledger is stored."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """
        Check whether a persisted ledger is present.

        Returns:
            True if load() would read existing data
        """
        pass

    @abstractmethod
    def load(self) -> Ledger:
        """
        Load the full ledger.

        Returns:
            The stored ledger, or an empty one if nothing is stored yet

        Raises:
            LedgerCorruptedError: If stored data does not match the schema
            StorageError: If the location cannot be read
        """
        pass

    @abstractmethod
    def save(self, ledger: Ledger) -> None:
        """
        Replace the stored ledger with this one.

        Args:
            ledger: The complete ledger to persist

        Raises:
            StorageError: If the ledger could not be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class LedgerCorruptedError(StorageError):
    """Stored data could not be parsed into the ledger schema."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
