"""
Audit Models for Hisaab

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability from a spoken utterance to the record it produced
2. Debugging information when a classification looks wrong
3. A history of edits and deletions made by voice

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step in the utterance pipeline has its own event type.
    """
    # Classification
    UTTERANCE_RECEIVED = "utterance_received"
    UTTERANCE_CLASSIFIED = "utterance_classified"
    LOW_CONFIDENCE_CLASSIFICATION = "low_confidence_classification"
    MODEL_FALLBACK_USED = "model_fallback_used"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    TRANSACTION_SAVED = "transaction_saved"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Query operations
    QUERY_EXECUTED = "query_executed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'utterance', 'transaction', 'query')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - all events caused by one utterance share this
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered directly by the user speaking?"
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
            "entity_id": str(self.entity_id) if self.entity_id else None,
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
        event = AuditEventBuilder.utterance_received(text, correlation_id)
        event = AuditEventBuilder.transaction_saved(txn_id, "sale", "500", correlation_id)
    """

    @staticmethod
    def utterance_received(
        utterance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UTTERANCE_RECEIVED,
            entity_type="utterance",
            correlation_id=correlation_id,
            description=f"Utterance received ({len(utterance)} chars)",
            details={"utterance": utterance},
            is_user_action=True,
        )

    @staticmethod
    def utterance_classified(
        kind: str,
        label: str,
        stage: str,
        source: str,
        confidence: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UTTERANCE_CLASSIFIED,
            entity_type="utterance",
            correlation_id=correlation_id,
            description=f"Classified as {kind}: {label} ({confidence:.0%} confidence)",
            details={
                "kind": kind,
                "label": label,
                "stage": stage,
                "source": source,
                "confidence": confidence,
            },
        )

    @staticmethod
    def low_confidence(
        utterance: str,
        stage: str,
        confidence: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOW_CONFIDENCE_CLASSIFICATION,
            severity=AuditSeverity.WARNING,
            entity_type="utterance",
            correlation_id=correlation_id,
            description=f"Low confidence classification via {stage}",
            details={
                "utterance": utterance,
                "stage": stage,
                "confidence": confidence,
            },
        )

    @staticmethod
    def model_fallback_used(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MODEL_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            entity_type="utterance",
            correlation_id=correlation_id,
            description="Model classification failed, rule-based result used",
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def transaction_saved(
        transaction_id: UUID,
        type_: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction saved: {type_} - ₹{amount}",
            details={
                "type": type_,
                "amount": amount,
            },
        )

    @staticmethod
    def transaction_updated(
        transaction_id: UUID,
        changes: dict,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction updated by voice command",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction deleted by voice command",
            is_user_action=True,
        )

    @staticmethod
    def query_executed(
        query_id: UUID,
        action: str,
        result_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            entity_type="query",
            entity_id=query_id,
            correlation_id=correlation_id,
            description=f"Query executed: {action} over {result_count} transactions",
            details={
                "action": action,
                "result_count": result_count,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
