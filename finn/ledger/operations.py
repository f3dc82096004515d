"""
Ledger Operations

Resolve account names inside a Ledger and run the entry primitives on
them. Every function takes the Ledger explicitly; nothing here keeps state
between calls.

Lookup is a linear scan that returns the first account with a matching
name. New accounts cannot reuse an existing name, but a ledger file written
by an older version may still contain duplicates. Those always resolve to
the first one.

Transfers are all-or-nothing: both balances move and both logs grow, or
neither account is touched.
"""

from datetime import date as Date
from decimal import Decimal
from typing import Optional

from finn.ledger.entries import (
    create_account,
    is_consistent,
    record_deposit,
    record_withdrawal,
    today,
)
from finn.models.ledger import (
    TRANSFER_IN_PREFIX,
    TRANSFER_OUT_PREFIX,
    Account,
    AccountBalance,
    AccountHistory,
    AccountsOverview,
    HistoryEntry,
    Ledger,
    OperationResult,
    OperationStatus,
    Transaction,
    TransactionType,
)


def find_account(ledger: Ledger, name: str) -> Optional[Account]:
    """Return the first account called name, or None."""
    for account in ledger.accounts:
        if account.name == name:
            return account
    return None


def add_account(
    ledger: Ledger,
    name: str,
    initial_balance: Decimal,
    description: str,
    on: Optional[Date] = None,
) -> OperationResult:
    """Create an account with its opening deposit and append it to the ledger."""
    if find_account(ledger, name) is not None:
        return OperationResult(
            status=OperationStatus.DUPLICATE_ACCOUNT,
            message=f"account `{name}` already exists",
            account_name=name,
        )

    account = create_account(name, initial_balance, description, on=on)
    ledger.accounts.append(account)
    return OperationResult.ok(
        name,
        amount=initial_balance,
        message=f"new account {name}",
    )


def deposit_funds(
    ledger: Ledger,
    name: str,
    amount: Decimal,
    description: str,
    on: Optional[Date] = None,
) -> OperationResult:
    account = find_account(ledger, name)
    if account is None:
        return OperationResult.not_found(name)
    return record_deposit(account, amount, description, on=on)


def withdraw_funds(
    ledger: Ledger,
    name: str,
    amount: Decimal,
    description: str,
    on: Optional[Date] = None,
) -> OperationResult:
    account = find_account(ledger, name)
    if account is None:
        return OperationResult.not_found(name)
    return record_withdrawal(account, amount, description, on=on)


def transfer(
    source: Account,
    destination: Account,
    amount: Decimal,
    on: Optional[Date] = None,
) -> OperationResult:
    """
    Move amount from source to destination.

    The guard is the same as for a withdrawal: the source balance must
    cover the full amount. Both legs are built and both new balances are
    computed before either account is modified. A negative amount would
    run the transfer backwards, so it is refused.
    """
    if amount < 0:
        return OperationResult(
            status=OperationStatus.INVALID_AMOUNT,
            message="amount must not be negative",
            account_name=source.name,
            counterparty_name=destination.name,
            amount=amount,
        )

    if source.balance < amount:
        return OperationResult.insufficient_funds(
            source.name, amount, counterparty_name=destination.name
        )

    when = on or today()
    outgoing = Transaction(
        date=when,
        description=f"{TRANSFER_OUT_PREFIX}{destination.name}",
        amount=amount,
        transaction_type=TransactionType.TRANSFER,
    )
    incoming = Transaction(
        date=when,
        description=f"{TRANSFER_IN_PREFIX}{source.name}",
        amount=amount,
        transaction_type=TransactionType.TRANSFER,
    )
    source_balance = source.balance - amount
    destination_balance = destination.balance + amount

    source.balance = source_balance
    source.transactions.append(outgoing)
    destination.balance = destination_balance
    destination.transactions.append(incoming)

    return OperationResult.ok(
        source.name, amount=amount, counterparty_name=destination.name
    )


def transfer_funds(
    ledger: Ledger,
    source_name: str,
    destination_name: str,
    amount: Decimal,
    on: Optional[Date] = None,
) -> OperationResult:
    """Find both accounts in one pass, then run the transfer."""
    if source_name == destination_name:
        return OperationResult(
            status=OperationStatus.SAME_ACCOUNT,
            message="cannot transfer an account to itself",
            account_name=source_name,
            counterparty_name=destination_name,
            amount=amount,
        )

    source: Optional[Account] = None
    destination: Optional[Account] = None
    for account in ledger.accounts:
        if source is None and account.name == source_name:
            source = account
        elif destination is None and account.name == destination_name:
            destination = account

        if source is not None and destination is not None:
            break

    if source is None or destination is None:
        return OperationResult.not_found(source_name, destination_name)

    return transfer(source, destination, amount, on=on)


def account_history(ledger: Ledger, name: str) -> Optional[AccountHistory]:
    """Read-only view of an account's log, or None if there is no such account."""
    account = find_account(ledger, name)
    if account is None:
        return None

    return AccountHistory(
        name=account.name,
        entries=[
            HistoryEntry(
                date=transaction.date,
                amount=transaction.amount,
                description=transaction.description,
                transaction_type=transaction.transaction_type,
            )
            for transaction in account.transactions
        ],
    )


def accounts_overview(ledger: Ledger) -> AccountsOverview:
    """Accounts by descending balance (ties keep ledger order) and their total."""
    ranked = sorted(ledger.accounts, key=lambda a: a.balance, reverse=True)
    return AccountsOverview(
        accounts=[
            AccountBalance(name=account.name, balance=account.balance)
            for account in ranked
        ],
        total=sum((account.balance for account in ledger.accounts), Decimal("0")),
    )


def check_consistency(ledger: Ledger) -> list[str]:
    """
    Names of accounts whose stored balance disagrees with their log.

    Only reports; balances are never rewritten from the log.
    """
    return [
        account.name
        for account in ledger.accounts
        if not is_consistent(account)
    ]
