"""
Ledger Models for Hisaab

Models used by the collaborators around the classifier:
- StoredTransaction: a TransactionRecord after persistence assigned identity
- QueryResult: the answer computed for a QueryRecord
- TransactionUpdateCommand: a spoken edit to an existing transaction
- ValidationIssue / ValidationResult: pre-persistence checks
- FlowResponse: what the orchestrator hands back for one utterance

DESIGN DECISION: The classifier never sees these. It emits records;
storage and query execution own everything after that point.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from hisaab.models.records import (
    ClassificationOutcome,
    Direction,
    QueryAction,
    TimeRange,
    TransactionRecord,
    TransactionType,
)


# =============================================================================
# PERSISTED TRANSACTIONS
# =============================================================================

class StoredTransaction(BaseModel):
    """
    A transaction as held by the ledger storage.

    Created from a TransactionRecord. "today" is resolved to a calendar
    date at save time; identity and timestamp are assigned here.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the transaction was saved"
    )

    direction: Direction
    type: TransactionType
    party_name: Optional[str] = None
    amount: Decimal = Field(ge=0)
    date: date
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    @classmethod
    def from_record(
        cls,
        record: TransactionRecord,
        today: Optional[date] = None,
    ) -> 'StoredTransaction':
        """Resolve a classified record into a storable transaction."""
        today = today or date.today()
        if record.date == "today":
            resolved = today
        else:
            resolved = date.fromisoformat(record.date)

        return cls(
            direction=record.direction,
            type=record.type,
            party_name=record.party_name,
            amount=record.amount,
            date=resolved,
            notes=record.notes or None,
        )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its direction (in = positive)."""
        return self.amount if self.direction == Direction.IN else -self.amount


# =============================================================================
# QUERY RESULTS
# =============================================================================

class QueryResult(BaseModel):
    """
    Result of executing a QueryRecord against stored transactions.

    Only ever contains numbers computed from storage.
    """

    query_id: UUID = Field(default_factory=uuid4)
    executed_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    action: QueryAction
    time_range: Optional[TimeRange] = None
    party_name: Optional[str] = None

    # Success/failure
    success: bool
    error_message: Optional[str] = None

    total: Decimal = Field(
        default=Decimal("0"),
        description="Sum, net balance or party balance depending on action"
    )
    result_count: int = Field(
        default=0,
        ge=0,
        description="Number of transactions that contributed"
    )
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    query_description: str = Field(
        ...,
        description="Human-readable description of what was queried"
    )

    @property
    def data_found(self) -> bool:
        return self.result_count > 0


# =============================================================================
# UPDATE COMMANDS
# =============================================================================

class UpdateIntent(str, Enum):
    """What a spoken command wants done to an existing transaction."""
    MODIFY = "modify_transaction"
    DELETE = "delete_transaction"
    READ_ALOUD = "read_aloud_transaction"


UNCLEAR_MODIFICATION = "unclear modification"


class TransactionUpdateCommand(BaseModel):
    """
    Parsed edit command for an existing transaction.

    For MODIFY, a None field means "keep the current value".
    """
    model_config = ConfigDict(frozen=True)

    intent: UpdateIntent
    amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @property
    def is_unclear(self) -> bool:
        return (
            self.intent == UpdateIntent.MODIFY
            and self.amount is None
            and self.notes == UNCLEAR_MODIFICATION
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Result of checking a TransactionRecord before it is saved."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


# =============================================================================
# FLOW RESPONSES
# =============================================================================

class FlowResponse(BaseModel):
    """
    What one handled utterance or update command produced.

    `reply` is always set and is what the user hears or reads.
    """

    correlation_id: UUID
    reply: str
    outcome: Optional[ClassificationOutcome] = None
    transaction: Optional[StoredTransaction] = None
    query_result: Optional[QueryResult] = None
    validation: Optional[ValidationResult] = None
    command: Optional[TransactionUpdateCommand] = None
    saved: bool = False

    @property
    def needs_confirmation(self) -> bool:
        """True when the user should confirm or repeat what they said."""
        if self.validation is not None and not self.validation.is_valid:
            return True
        return self.command is not None and self.command.is_unclear
