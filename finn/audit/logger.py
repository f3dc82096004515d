"""
Audit Logger

DESIGN DECISION: Every ledger operation is logged, including the ones
that were refused. This provides:
1. Traceability of what each command did to the ledger
2. Debugging capability when balances look wrong
3. A record of failed loads and saves

The audit logger:
- Writes structured JSON lines through structlog (stderr by default)
- Never raises for business outcomes; it only reports them
- Supports correlation IDs to tie together the events of one command
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finn.models.audit import AuditEvent, AuditEventBuilder
from finn.models.ledger import OperationResult, OperationStatus


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_log_level(level: str) -> None:
    """
    Route stdlib logging (and so structlog) to stderr at the given level.

    Entry points call this once; library code never does.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
    )


class AuditLogger:
    """
    Central audit logging service.

    Turns ledger outcomes and storage activity into AuditEvents and
    writes them to the structured log.
    """

    def __init__(self, correlation_id: Optional[UUID] = None):
        """
        Initialize audit logger.

        Args:
            correlation_id: Attached to every event that does not carry
                    its own. Usually one per command invocation.
        """
        self._correlation_id = correlation_id
        self._logger = structlog.get_logger("finn.audit")

    @property
    def correlation_id(self) -> Optional[UUID]:
        return self._correlation_id

    def log(self, event: AuditEvent) -> AuditEvent:
        """
        Log an audit event.

        Returns the event that was written.
        """
        if event.correlation_id is None and self._correlation_id is not None:
            event = event.model_copy(update={"correlation_id": self._correlation_id})

        log_dict = event.to_log_dict()
        severity = event.severity.value

        if severity == "critical":
            self._logger.critical("audit_event", **log_dict)
        elif severity == "error":
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        return event

    def log_operation(self, operation: str, result: OperationResult) -> AuditEvent:
        """
        Log the outcome of one ledger operation.

        Args:
            operation: "add", "deposit", "withdraw" or "transfer"
            result: What the operation returned
        """
        name = result.account_name or ""
        status = result.status

        if status == OperationStatus.ACCOUNT_NOT_FOUND and operation != "transfer":
            event = AuditEventBuilder.account_not_found(name)
        elif operation == "add":
            if status == OperationStatus.DUPLICATE_ACCOUNT:
                event = AuditEventBuilder.duplicate_account_rejected(name)
            else:
                event = AuditEventBuilder.account_created(name, result.amount)
        elif operation == "deposit":
            event = AuditEventBuilder.deposit_recorded(name, result.amount)
        elif operation == "withdraw":
            if result.success:
                event = AuditEventBuilder.withdrawal_recorded(name, result.amount)
            else:
                event = AuditEventBuilder.withdrawal_rejected(name, result.amount)
        elif operation == "transfer":
            destination = result.counterparty_name or ""
            if result.success:
                event = AuditEventBuilder.transfer_completed(
                    name, destination, result.amount
                )
            else:
                event = AuditEventBuilder.transfer_rejected(
                    name, destination, result.amount, reason=status.value
                )
        else:
            raise ValueError(f"Unknown ledger operation: {operation}")

        return self.log(event)

    def log_ledger_loaded(self, location: str, account_count: int) -> AuditEvent:
        """Log a successful load."""
        return self.log(AuditEventBuilder.ledger_loaded(location, account_count))

    def log_ledger_saved(self, location: str, account_count: int) -> AuditEvent:
        """Log a successful save."""
        return self.log(AuditEventBuilder.ledger_saved(location, account_count))

    def log_storage_error(
        self,
        location: str,
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        """Log a failed load or save."""
        return self.log(
            AuditEventBuilder.storage_error(location, operation, error_message)
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a command and hand it to the AuditLogger.
    """
    return uuid4()
