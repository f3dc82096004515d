"""Ledger core: entry primitives and the operations built on them."""

from finn.ledger.entries import (
    create_account,
    is_consistent,
    net_effect,
    record_deposit,
    record_withdrawal,
    today,
)
from finn.ledger.operations import (
    account_history,
    accounts_overview,
    add_account,
    check_consistency,
    deposit_funds,
    find_account,
    transfer,
    transfer_funds,
    withdraw_funds,
)

__all__ = [
    # Entry primitives
    "create_account",
    "is_consistent",
    "net_effect",
    "record_deposit",
    "record_withdrawal",
    "today",
    # Operations
    "account_history",
    "accounts_overview",
    "add_account",
    "check_consistency",
    "deposit_funds",
    "find_account",
    "transfer",
    "transfer_funds",
    "withdraw_funds",
]
