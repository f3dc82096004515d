"""
Audit Models for Finn

Every ledger operation and every load/save produces one audit event.
This provides:
1. A readable trail of what each invocation did
2. Debugging information when a ledger file goes bad
3. A record of rejected operations, not just successful ones

DESIGN DECISION: Audit events are written to the structured log only.
They are not a tamper-proof record and are never read back by the ledger.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Account lifecycle
    ACCOUNT_CREATED = "account_created"
    DUPLICATE_ACCOUNT_REJECTED = "duplicate_account_rejected"

    # Balance changes
    DEPOSIT_RECORDED = "deposit_recorded"
    WITHDRAWAL_RECORDED = "withdrawal_recorded"
    WITHDRAWAL_REJECTED = "withdrawal_rejected"
    TRANSFER_COMPLETED = "transfer_completed"
    TRANSFER_REJECTED = "transfer_rejected"

    # Lookup
    ACCOUNT_NOT_FOUND = "account_not_found"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_SAVED = "ledger_saved"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Accounts are identified by name, so the entity is a name rather than
    a generated id.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'ledger')"
    )
    entity_name: Optional[str] = Field(
        default=None,
        description="Name of the account or location this event relates to"
    )

    # Correlation - all events of one invocation share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one command"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered directly by a user command?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_name": self.entity_name,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created("alice", Decimal("100"), correlation_id)
        event = AuditEventBuilder.ledger_saved("/home/me/bin/accounts.json", 3, correlation_id)
    """

    @staticmethod
    def account_created(
        name: str,
        initial_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_name=name,
            correlation_id=correlation_id,
            description=f"Account created: {name}",
            details={"initial_balance": str(initial_balance)},
            is_user_action=True,
        )

    @staticmethod
    def duplicate_account_rejected(
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_ACCOUNT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_name=name,
            correlation_id=correlation_id,
            description=f"Account already exists: {name}",
            is_user_action=True,
        )

    @staticmethod
    def deposit_recorded(
        name: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_RECORDED,
            entity_type="account",
            entity_name=name,
            correlation_id=correlation_id,
            description=f"Deposit of {amount} into {name}",
            details={"amount": str(amount)},
            is_user_action=True,
        )

    @staticmethod
    def withdrawal_recorded(
        name: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_RECORDED,
            entity_type="account",
            entity_name=name,
            correlation_id=correlation_id,
            description=f"Withdrawal of {amount} from {name}",
            details={"amount": str(amount)},
            is_user_action=True,
        )

    @staticmethod
    def withdrawal_rejected(
        name: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_name=name,
            correlation_id=correlation_id,
            description=f"Withdrawal of {amount} from {name} rejected: insufficient funds",
            details={"amount": str(amount)},
            is_user_action=True,
        )

    @staticmethod
    def transfer_completed(
        source: str,
        destination: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_COMPLETED,
            entity_type="account",
            entity_name=source,
            correlation_id=correlation_id,
            description=f"Transfer of {amount} from {source} to {destination}",
            details={"destination": destination, "amount": str(amount)},
            is_user_action=True,
        )

    @staticmethod
    def transfer_rejected(
        source: str,
        destination: str,
        amount: Optional[Decimal],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_name=source,
            correlation_id=correlation_id,
            description=f"Transfer from {source} to {destination} rejected: {reason}",
            details={
                "destination": destination,
                "amount": str(amount) if amount is not None else None,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_not_found(
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_name=name,
            correlation_id=correlation_id,
            description=f"Account not found: {name}",
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(
        location: str,
        account_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            entity_name=location,
            correlation_id=correlation_id,
            description=f"Loaded {account_count} account(s)",
            details={"account_count": account_count},
        )

    @staticmethod
    def ledger_saved(
        location: str,
        account_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            entity_type="ledger",
            entity_name=location,
            correlation_id=correlation_id,
            description=f"Saved {account_count} account(s)",
            details={"account_count": account_count},
        )

    @staticmethod
    def storage_error(
        location: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.CRITICAL,
            entity_type="ledger",
            entity_name=location,
            correlation_id=correlation_id,
            description=f"Storage {operation} failed",
            details={"operation": operation},
            error_message=error_message,
        )
