"""
Core Ledger Models for Finn

These models define the schema of everything the ledger stores and returns.
The persisted file is nothing more than a list of Account models dumped to
JSON, so the field names here ARE the storage format.

DESIGN DECISION: Amounts are magnitudes. The direction of a transaction is
carried only by its TransactionType (and, for transfers, by which account
holds the record). Never encode direction with a negative amount.

DESIGN DECISION: Business-rule failures (missing account, insufficient
funds) are returned as OperationResult values instead of being raised.
Callers display them and carry on to the save step.
"""

from datetime import date as Date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


TRANSFER_OUT_PREFIX = "Transfer to "
TRANSFER_IN_PREFIX = "Transfer from "


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """
    Kind of balance-affecting event.

    The values are the exact strings written to the ledger file.
    """
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    TRANSFER = "Transfer"


class OperationStatus(str, Enum):
    """Outcome of a ledger operation."""
    SUCCESS = "success"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_ACCOUNT = "duplicate_account"
    SAME_ACCOUNT = "same_account"
    INVALID_AMOUNT = "invalid_amount"


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Transaction(BaseModel):
    """
    A single entry in an account's log.

    Immutable once created. A transfer produces two of these, one in each
    participating account, each written from that account's point of view.
    """
    model_config = ConfigDict(frozen=True)

    date: Date = Field(
        ...,
        description="Calendar day the transaction was recorded"
    )
    description: str = Field(
        default="",
        description="Free text description"
    )
    amount: Decimal = Field(
        ...,
        description="Magnitude of the transaction"
    )
    transaction_type: TransactionType = Field(
        ...,
        description="Deposit, Withdrawal or Transfer"
    )

    @property
    def is_outgoing_transfer(self) -> bool:
        return (
            self.transaction_type == TransactionType.TRANSFER
            and self.description.startswith(TRANSFER_OUT_PREFIX)
        )

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this entry on the balance of the account holding it."""
        if self.transaction_type == TransactionType.WITHDRAWAL:
            return -self.amount
        if self.is_outgoing_transfer:
            return -self.amount
        return self.amount


class Account(BaseModel):
    """
    A named account with a stored balance and an append-only log.

    Transactions are kept in insertion order, which is the order they were
    recorded in. The balance is stored, not derived from the log.
    """

    name: str = Field(
        ...,
        description="Human readable account name, used for lookup"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current balance (may be negative)"
    )
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Transaction log in recorded order"
    )


class Ledger(BaseModel):
    """
    The full account collection.

    This is the context value handed to every ledger operation and back to
    storage. Nothing else holds ledger state.
    """

    accounts: list[Account] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.accounts)

    @property
    def names(self) -> list[str]:
        return [account.name for account in self.accounts]


# =============================================================================
# OPERATION OUTCOMES
# =============================================================================

class OperationResult(BaseModel):
    """
    What happened when an operation ran.

    The message is what the command line prints.
    """

    status: OperationStatus
    message: str
    account_name: Optional[str] = None
    counterparty_name: Optional[str] = None
    amount: Optional[Decimal] = None

    @property
    def success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def ok(
        cls,
        account_name: str,
        amount: Optional[Decimal] = None,
        counterparty_name: Optional[str] = None,
        message: str = "successful",
    ) -> "OperationResult":
        return cls(
            status=OperationStatus.SUCCESS,
            message=message,
            account_name=account_name,
            counterparty_name=counterparty_name,
            amount=amount,
        )

    @classmethod
    def insufficient_funds(
        cls,
        account_name: str,
        amount: Decimal,
        counterparty_name: Optional[str] = None,
    ) -> "OperationResult":
        return cls(
            status=OperationStatus.INSUFFICIENT_FUNDS,
            message="Insufficient funds.",
            account_name=account_name,
            counterparty_name=counterparty_name,
            amount=amount,
        )

    @classmethod
    def not_found(
        cls,
        account_name: str,
        counterparty_name: Optional[str] = None,
    ) -> "OperationResult":
        message = "account(s) not found" if counterparty_name else "account not found"
        return cls(
            status=OperationStatus.ACCOUNT_NOT_FOUND,
            message=message,
            account_name=account_name,
            counterparty_name=counterparty_name,
        )


# =============================================================================
# READ-ONLY PROJECTIONS
# =============================================================================

class HistoryEntry(BaseModel):
    """One line of an account's transaction history."""

    date: Date
    amount: Decimal
    description: str
    transaction_type: TransactionType


class AccountHistory(BaseModel):
    """Transaction history for one account, in log order."""

    name: str
    entries: list[HistoryEntry] = Field(default_factory=list)


class AccountBalance(BaseModel):
    name: str
    balance: Decimal


class AccountsOverview(BaseModel):
    """
    All accounts ordered by descending balance, plus the grand total.

    Built from a copy; the ledger's own order is left alone.
    """

    accounts: list[AccountBalance] = Field(default_factory=list)
    total: Decimal = Decimal("0")

    @property
    def is_empty(self) -> bool:
        return not self.accounts
