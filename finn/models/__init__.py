"""
Data Models Package

This package contains all Pydantic models used by Finn.
The ledger models double as the persisted schema.
"""

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
from finn.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "TRANSFER_IN_PREFIX",
    "TRANSFER_OUT_PREFIX",
    "Account",
    "AccountBalance",
    "AccountHistory",
    "AccountsOverview",
    "HistoryEntry",
    "Ledger",
    "OperationResult",
    "OperationStatus",
    "Transaction",
    "TransactionType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
