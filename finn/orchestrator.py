"""
Main Orchestrator for Finn

This module ties the ledger core to storage and the audit log, and
defines the one flow every command follows:

    load ledger -> run one operation -> save ledger

DESIGN DECISION: The ledger is an explicit value. The flow loads it,
hands it to the core operation, and passes the same value back to
storage. Nothing is kept between invocations.

Business outcomes (insufficient funds, unknown account) are returned
and audited; storage failures are audited and re-raised, because a
ledger that cannot be read or written must stop the command.
"""

from datetime import date as Date
from decimal import Decimal
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError

from finn.audit import AuditLogger
from finn.config import Settings, get_settings
from finn.ledger import (
    account_history,
    accounts_overview,
    add_account,
    check_consistency,
    deposit_funds,
    transfer_funds,
    withdraw_funds,
)
from finn.models.ledger import (
    AccountHistory,
    AccountsOverview,
    Ledger,
    OperationResult,
)
from finn.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageConnectionError,
    StorageError,
)


T = TypeVar("T")


class LedgerFlow:
    """
    Orchestrates ledger commands.

    Flow:
    1. Load → read the whole ledger from storage
    2. Operate → exactly one core operation on the loaded value
    3. Save → write the whole ledger back (mutating commands only)

    Every step is audited.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], Date]] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    def _today(self) -> Optional[Date]:
        return self._clock() if self._clock else None

    # -------------------------------------------------------------------------
    # Persistence boundary
    # -------------------------------------------------------------------------

    def load(self) -> Ledger:
        """Load the ledger, auditing failures before re-raising them."""
        try:
            ledger = self._storage.load()
        except StorageError as e:
            self._audit_logger.log_storage_error(self._storage.location, "load", str(e))
            raise

        self._audit_logger.log_ledger_loaded(self._storage.location, len(ledger))
        return ledger

    def save(self, ledger: Ledger) -> None:
        """Persist the ledger, auditing failures before re-raising them."""
        try:
            self._storage.save(ledger)
        except StorageError as e:
            self._audit_logger.log_storage_error(self._storage.location, "save", str(e))
            raise

        self._audit_logger.log_ledger_saved(self._storage.location, len(ledger))

    def run(self, action: Callable[[Ledger], T]) -> T:
        """
        Load, apply one mutating action, save.

        The ledger is saved even when the action reports a refused
        operation; in that case it is unchanged.
        """
        ledger = self.load()
        outcome = action(ledger)
        self.save(ledger)
        return outcome

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_account(
        self,
        ledger: Ledger,
        name: str,
        initial_balance: Decimal,
        description: str,
    ) -> OperationResult:
        result = add_account(ledger, name, initial_balance, description, on=self._today())
        self._audit_logger.log_operation("add", result)
        return result

    def deposit(
        self,
        ledger: Ledger,
        name: str,
        amount: Decimal,
        description: str,
    ) -> OperationResult:
        result = deposit_funds(ledger, name, amount, description, on=self._today())
        self._audit_logger.log_operation("deposit", result)
        return result

    def withdraw(
        self,
        ledger: Ledger,
        name: str,
        amount: Decimal,
        description: str,
    ) -> OperationResult:
        result = withdraw_funds(ledger, name, amount, description, on=self._today())
        self._audit_logger.log_operation("withdraw", result)
        return result

    def transfer(
        self,
        ledger: Ledger,
        source_name: str,
        destination_name: str,
        amount: Decimal,
    ) -> OperationResult:
        result = transfer_funds(
            ledger, source_name, destination_name, amount, on=self._today()
        )
        self._audit_logger.log_operation("transfer", result)
        return result

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def history(self, ledger: Ledger, name: str) -> Optional[AccountHistory]:
        return account_history(ledger, name)

    def overview(self, ledger: Ledger) -> AccountsOverview:
        return accounts_overview(ledger)

    def inconsistent_accounts(self, ledger: Ledger) -> list[str]:
        return check_consistency(ledger)


def create_storage(settings: Optional[Settings] = None) -> LedgerStorageInterface:
    """
    Build the storage backend selected in the settings.

    Raises:
        StorageConnectionError: If Google Sheets is selected but not configured
    """
    settings = settings or get_settings()
    ledger_settings = settings.ledger

    if ledger_settings.storage_backend == "sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets)
        except ValidationError as e:
            raise StorageConnectionError(
                f"Google Sheets storage is not configured: {e}"
            ) from e
        return GoogleSheetsLedgerStorage(client)

    return JsonFileLedgerStorage(ledger_settings.ledger_path)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[LedgerStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> LedgerFlow:
    """
    Factory function to create the application flow.

    Args:
        settings: Settings to use; the cached settings if omitted
        storage: Storage to use instead of the configured backend
        audit_logger: Audit logger to use; a fresh one if omitted

    Returns:
        A LedgerFlow ready to load the ledger
    """
    storage = storage or create_storage(settings)
    return LedgerFlow(storage=storage, audit_logger=audit_logger)
