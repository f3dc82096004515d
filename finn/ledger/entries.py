"""
Ledger Entry Primitives

The only code that changes an account's balance or appends to its log.
Each primitive updates both together so that the balance always equals
the sum of the signed amounts in the log.

IMPORTANT: These functions mutate the account they are given. They never
raise for business rules; a refused withdrawal comes back as an
OperationResult with status INSUFFICIENT_FUNDS.
"""

from datetime import date as Date
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from finn.models.ledger import (
    Account,
    OperationResult,
    Transaction,
    TransactionType,
)


def today() -> Date:
    """Current calendar day in UTC."""
    return datetime.now(timezone.utc).date()


def create_account(
    name: str,
    initial_balance: Decimal,
    description: str,
    on: Optional[Date] = None,
) -> Account:
    """
    Build a new account whose log holds the opening deposit.

    The sign of the opening balance is not checked.
    """
    opening = Transaction(
        date=on or today(),
        description=description,
        amount=initial_balance,
        transaction_type=TransactionType.DEPOSIT,
    )
    return Account(
        name=name,
        balance=initial_balance,
        transactions=[opening],
    )


def record_deposit(
    account: Account,
    amount: Decimal,
    description: str,
    on: Optional[Date] = None,
) -> OperationResult:
    """Add amount to the balance and log a Deposit. Always succeeds."""
    transaction = Transaction(
        date=on or today(),
        description=description,
        amount=amount,
        transaction_type=TransactionType.DEPOSIT,
    )
    account.balance += amount
    account.transactions.append(transaction)
    return OperationResult.ok(account.name, amount=amount)


def record_withdrawal(
    account: Account,
    amount: Decimal,
    description: str,
    on: Optional[Date] = None,
) -> OperationResult:
    """
    Subtract amount from the balance and log a Withdrawal.

    Refused, with nothing changed, when the balance is smaller than amount.
    """
    if account.balance < amount:
        return OperationResult.insufficient_funds(account.name, amount)

    transaction = Transaction(
        date=on or today(),
        description=description,
        amount=amount,
        transaction_type=TransactionType.WITHDRAWAL,
    )
    account.balance -= amount
    account.transactions.append(transaction)
    return OperationResult.ok(account.name, amount=amount)


def net_effect(account: Account) -> Decimal:
    """Sum of the signed amounts in the account's log."""
    return sum(
        (transaction.signed_amount for transaction in account.transactions),
        Decimal("0"),
    )


def is_consistent(account: Account) -> bool:
    return account.balance == net_effect(account)
