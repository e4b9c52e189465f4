"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability from an utterance to the record it produced
2. Debugging capability when a classification looks wrong
3. A history of voice edits and deletions

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from hisaab.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from hisaab.services.storage import AuditStorageInterface


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


def configure_logging(log_level: str = "INFO") -> None:
    """
    Route structured logs to stderr at the given level.

    stdout stays clean for command output.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("hisaab.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_utterance_received(
        self,
        utterance: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.utterance_received(
            utterance=utterance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_utterance_classified(
        self,
        kind: str,
        label: str,
        stage: str,
        source: str,
        confidence: float,
        correlation_id: UUID,
    ) -> None:
        """Log which record an utterance became and how sure we are."""
        event = AuditEventBuilder.utterance_classified(
            kind=kind,
            label=label,
            stage=stage,
            source=source,
            confidence=confidence,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_low_confidence(
        self,
        utterance: str,
        stage: str,
        confidence: float,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.low_confidence(
            utterance=utterance,
            stage=stage,
            confidence=confidence,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_model_fallback(
        self,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log that the model failed and the rule engine answered instead."""
        event = AuditEventBuilder.model_fallback_used(
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log validation failure."""
        event = AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_saved(
        self,
        transaction_id: UUID,
        type_: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            type_=type_,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_updated(
        self,
        transaction_id: UUID,
        changes: dict,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            changes=changes,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_deleted(
        self,
        transaction_id: UUID,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_query_executed(
        self,
        query_id: UUID,
        action: str,
        result_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log query execution."""
        event = AuditEventBuilder.query_executed(
            query_id=query_id,
            action=action,
            result_count=result_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when an utterance arrives. Pass it through every
    step that utterance causes.
    """
    return uuid4()
