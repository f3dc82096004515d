"""
JSON File Storage Implementation

The ledger is stored as a single JSON array of accounts, each with its
name, balance and transaction list. This is the format the command
line tool has always kept in ~/bin/accounts.json.

DESIGN DECISION: Saves never truncate the live file. The new ledger is
written to a temporary file next to it, flushed to disk, and then moved
over the old one with os.replace. A crash mid-save leaves the previous
ledger intact. An existing file keeps its permissions; a new file is
created readable by its owner only.

Amounts are written as decimal strings so a load after a save gives back
exactly the same values. Plain JSON numbers from older files are still
accepted on load.
"""

import contextlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

import structlog
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finn.models.ledger import Account, Ledger
from finn.services.storage.interface import (
    LedgerCorruptedError,
    LedgerStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

_ACCOUNTS = TypeAdapter(list[Account])


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger stored in one JSON file on the local disk.

    A missing file is an empty ledger, not an error.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Ledger:
        """Read and validate the ledger file."""
        try:
            contents = self._path.read_bytes()
        except FileNotFoundError:
            logger.debug("ledger_file_missing", path=self.location)
            return Ledger()
        except OSError as e:
            raise StorageError(f"Failed to read ledger file {self._path}: {e}") from e

        try:
            accounts = _ACCOUNTS.validate_json(contents)
        except ValidationError as e:
            raise LedgerCorruptedError(
                f"Ledger file {self._path} is not a valid ledger: {e}"
            ) from e

        logger.debug("ledger_file_loaded", path=self.location, accounts=len(accounts))
        return Ledger(accounts=accounts)

    def save(self, ledger: Ledger) -> None:
        """Serialize the ledger and atomically replace the file."""
        payload = _ACCOUNTS.dump_json(ledger.accounts, indent=2)
        try:
            self._write_atomically(payload)
        except OSError as e:
            raise StorageError(f"Failed to write ledger file {self._path}: {e}") from e

        logger.debug("ledger_file_saved", path=self.location, accounts=len(ledger))

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write_atomically(self, payload: bytes) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=directory,
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            # Keep the permissions of the file being replaced
            with contextlib.suppress(FileNotFoundError):
                shutil.copymode(self._path, tmp)
            os.replace(tmp, self._path)
        except Exception:
            # Leave no stray temp files behind
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise
