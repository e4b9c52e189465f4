"""Assembly of output records from the pieces the classifier extracted."""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union

from hisaab.classifier.matching import find_phrase
from hisaab.classifier.vocabulary import EXPENSE_SUBTYPES
from hisaab.models.records import Classification, TransactionRecord, TransactionType


def expense_subtype(text: str) -> Optional[str]:
    """Name the kind of expense ("Electricity bill", "Rent", ...) or None."""
    lower = text.lower()
    for keywords, label in EXPENSE_SUBTYPES:
        if find_phrase(lower, keywords) is not None:
            return label
    return None


def build_notes(
    type_: TransactionType,
    party_name: Optional[str],
    utterance: str,
) -> str:
    """Human-readable description for a transaction of the given type."""
    utterance = utterance.strip()

    if type_ == TransactionType.LOAN_TAKEN:
        return f"Loan from {party_name}" if party_name else "Loan received"
    if type_ == TransactionType.LOAN_GIVEN:
        return f"Loan to {party_name}" if party_name else "Loan given"
    if type_ == TransactionType.SALE:
        return f"Sale to {party_name}" if party_name else utterance
    if type_ == TransactionType.EXPENSE:
        return f"Expense: {expense_subtype(utterance) or utterance}"
    if type_ == TransactionType.PURCHASE:
        return "Inventory purchase"
    return f"Unclassified: {utterance}"


def build_transaction_record(
    classification: Classification,
    amount: Decimal,
    party_name: Optional[str],
    utterance: str,
    date: Union[str, dt.date, None] = None,
) -> TransactionRecord:
    """
    Build the add_transaction record.

    The date stays "today" unless the caller supplies one; turning
    "today" into a calendar date is the persistence layer's job.
    """
    return TransactionRecord(
        direction=classification.direction,
        type=classification.type,
        party_name=party_name,
        amount=amount,
        date=date if date is not None else "today",
        notes=build_notes(classification.type, party_name, utterance)[:1000],
    )
