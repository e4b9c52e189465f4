"""
Data Models Package

This package contains all Pydantic models used in Hisaab.
All data flowing out of the classifier must conform to these schemas.
"""

from hisaab.models.records import (
    DIRECTION_BY_TYPE,
    Classification,
    ClassificationOutcome,
    ClassificationStage,
    Direction,
    QueryAction,
    QueryRecord,
    RecordParseError,
    TimeRange,
    TransactionRecord,
    TransactionType,
    UtteranceRecord,
    parse_record,
)
from hisaab.models.ledger import (
    UNCLEAR_MODIFICATION,
    FlowResponse,
    QueryResult,
    StoredTransaction,
    TransactionUpdateCommand,
    UpdateIntent,
    ValidationIssue,
    ValidationResult,
)
from hisaab.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "DIRECTION_BY_TYPE",
    "Classification",
    "ClassificationOutcome",
    "ClassificationStage",
    "Direction",
    "QueryAction",
    "QueryRecord",
    "RecordParseError",
    "TimeRange",
    "TransactionRecord",
    "TransactionType",
    "UtteranceRecord",
    "parse_record",
    # Ledger models
    "UNCLEAR_MODIFICATION",
    "FlowResponse",
    "QueryResult",
    "StoredTransaction",
    "TransactionUpdateCommand",
    "UpdateIntent",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
