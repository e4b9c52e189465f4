"""
Core Record Models for Hisaab

These models define the strict output schemas of the utterance classifier.
They are designed to:
1. Make the output space closed and exhaustively checkable (enums, not strings)
2. Keep type and direction jointly consistent
3. Serialize to exactly the JSON shapes the storage and query layers expect

DESIGN DECISION: Records are frozen. A classification is produced once per
utterance and handed over; nothing downstream is allowed to mutate it.
"""

import datetime as dt
import json
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """What kind of money movement was recorded."""
    SALE = "sale"
    PURCHASE = "purchase"
    LOAN_GIVEN = "loan_given"
    LOAN_TAKEN = "loan_taken"
    EXPENSE = "expense"
    OTHER = "other"


class Direction(str, Enum):
    """
    Money-flow sign relative to the shopkeeper.

    IN = money received, OUT = money paid.
    """
    IN = "in"
    OUT = "out"


class QueryAction(str, Enum):
    """Aggregations the query layer knows how to answer."""
    TOTAL_SALES = "query_total_sales"
    TOTAL_EXPENSES = "query_total_expenses"
    OVERALL_SUMMARY = "query_overall_summary"
    BALANCE = "query_balance"


class TimeRange(str, Enum):
    """Relative time windows a query can ask about."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    ALL = "all"


class ClassificationStage(str, Enum):
    """
    Which rule decided a classification.

    Kept on every outcome so a low-confidence decision can be traced
    back to the exact cascade branch that produced it.
    """
    QUERY = "query"
    QUERY_DEFAULT = "query_default"
    LOAN_PHRASE = "loan_phrase"
    LOAN_VERB = "loan_verb"
    LOAN_PREPOSITION = "loan_preposition"
    LOAN_DEFAULT = "loan_default"
    EXPENSE_KEYWORD = "expense_keyword"
    SALE_BY_PROXIMITY = "sale_by_proximity"
    SALE_KEYWORD = "sale_keyword"
    CREDIT_VERB = "credit_verb"
    DEBIT_VERB = "debit_verb"
    GIVING_VERB = "giving_verb"
    TAKING_VERB = "taking_verb"
    PARTY_PREPOSITION = "party_preposition"
    COMPLETION_MARKER = "completion_marker"
    FALLBACK = "fallback"
    MODEL = "model"


# Direction convention. OTHER has no fixed direction.
DIRECTION_BY_TYPE: dict[TransactionType, Direction] = {
    TransactionType.SALE: Direction.IN,
    TransactionType.LOAN_TAKEN: Direction.IN,
    TransactionType.PURCHASE: Direction.OUT,
    TransactionType.EXPENSE: Direction.OUT,
    TransactionType.LOAN_GIVEN: Direction.OUT,
}


def _check_direction(type_: TransactionType, direction: Direction) -> None:
    expected = DIRECTION_BY_TYPE.get(type_)
    if expected is not None and direction != expected:
        raise ValueError(
            f"Direction '{direction.value}' contradicts type '{type_.value}' "
            f"(expected '{expected.value}')"
        )


# =============================================================================
# CLASSIFICATION
# =============================================================================

class Classification(BaseModel):
    """
    A (type, direction) pair produced by the transaction cascade.

    CRITICAL: The pair is validated on construction. A sale that
    flows out, or a loan given that flows in, is a defect and is
    rejected here rather than stored.
    """
    model_config = ConfigDict(frozen=True)

    type: TransactionType
    direction: Direction

    @model_validator(mode='after')
    def validate_direction(self) -> 'Classification':
        _check_direction(self.type, self.direction)
        return self

    @classmethod
    def of(cls, type_: TransactionType) -> 'Classification':
        """Build a classification using the conventional direction for a type."""
        return cls(type=type_, direction=DIRECTION_BY_TYPE[type_])


# =============================================================================
# OUTPUT RECORDS
# =============================================================================

class TransactionRecord(BaseModel):
    """
    A recorded money movement.

    This is handed to the persistence collaborator, which turns
    date="today" into a calendar date and assigns identity.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["transaction"] = "transaction"
    action: Literal["add_transaction"] = "add_transaction"
    direction: Direction
    type: TransactionType
    party_name: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Counterparty, title-cased"
    )
    amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount in INR; 0 when none was spoken"
    )
    date: str = Field(
        default="today",
        description='"today" or an ISO YYYY-MM-DD date'
    )
    notes: str = Field(
        default="",
        max_length=1000,
        description="Human-readable description"
    )

    @field_validator('date', mode='before')
    @classmethod
    def validate_date(cls, v) -> str:
        """Accept "today", an ISO date string or a date object."""
        if v is None:
            return "today"
        if isinstance(v, dt.date):
            return v.isoformat()
        if isinstance(v, str):
            value = v.strip().lower()
            if value == "today":
                return value
            try:
                return dt.date.fromisoformat(value).isoformat()
            except ValueError:
                raise ValueError(f"Date must be 'today' or YYYY-MM-DD, got: {v}")
        raise ValueError(f"Unsupported date value: {v!r}")

    @model_validator(mode='after')
    def validate_direction(self) -> 'TransactionRecord':
        _check_direction(self.type, self.direction)
        return self

    @field_serializer('amount')
    def serialize_amount(self, amount: Decimal) -> float:
        # Downstream consumers expect a JSON number, not a string
        return float(amount)

    @property
    def classification(self) -> Classification:
        return Classification(type=self.type, direction=self.direction)


class QueryRecord(BaseModel):
    """A request to aggregate existing records."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["query"] = "query"
    action: QueryAction
    party_name: Optional[str] = Field(
        default=None,
        max_length=100,
    )
    time_range: Optional[TimeRange] = None


UtteranceRecord = Annotated[
    Union[TransactionRecord, QueryRecord],
    Field(discriminator="kind"),
]

_record_adapter: TypeAdapter = TypeAdapter(UtteranceRecord)


class RecordParseError(ValueError):
    """A JSON document did not match either record schema."""
    pass


def parse_record(text: str) -> Union[TransactionRecord, QueryRecord]:
    """
    Validate a JSON document against the Transaction/Query schemas.

    The "kind" field selects the schema. Raises RecordParseError
    for malformed JSON, unknown kinds or schema violations.
    """
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise RecordParseError(f"Invalid JSON: {e}") from e

    try:
        return _record_adapter.validate_python(payload)
    except ValidationError as e:
        raise RecordParseError(f"Record does not match schema: {e}") from e


class ClassificationOutcome(BaseModel):
    """
    A classified utterance plus how sure we are about it.

    The record is what gets stored or executed. The rest is diagnostics:
    callers should surface low-confidence outcomes for confirmation
    rather than silently trusting them.
    """
    model_config = ConfigDict(frozen=True)

    record: UtteranceRecord
    confidence: float = Field(ge=0.0, le=1.0)
    stage: ClassificationStage
    source: str = Field(
        default="rules",
        description="Which classifier produced the record: rules or gemini"
    )
    reasoning: str = ""
    fallback_reason: Optional[str] = Field(
        default=None,
        description="Why the primary classifier was bypassed, if it was"
    )

    @property
    def is_query(self) -> bool:
        return isinstance(self.record, QueryRecord)

    def is_low_confidence(self, threshold: float = 0.5) -> bool:
        return self.confidence < threshold

    def to_json(self) -> str:
        """Serialize just the record, in the exact boundary schema."""
        return self.record.model_dump_json()
