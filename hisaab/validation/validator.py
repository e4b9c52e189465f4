"""
Transaction Validation

DESIGN DECISION: A classified record is checked before it is saved.

ERRORS block the save:
- Amount missing or zero (nothing was heard that could be booked)

WARNINGS are saved but surfaced to the user:
- Amount above the configured sanity ceiling
- A loan with nobody to owe or be owed
- An explicit date in the future

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can repeat or correct the utterance.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from hisaab.config import AppSettings, get_settings
from hisaab.models.ledger import ValidationIssue, ValidationResult
from hisaab.models.records import TransactionRecord, TransactionType

_LOAN_TYPES = (TransactionType.LOAN_GIVEN, TransactionType.LOAN_TAKEN)


class TransactionValidator:
    """Validates a TransactionRecord before persistence."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate(
        self,
        record: TransactionRecord,
        today: Optional[dt.date] = None,
    ) -> ValidationResult:
        """
        Check one record.

        Returns a ValidationResult; is_valid is False only when an
        error-severity issue was found.
        """
        issues: list[ValidationIssue] = []
        issues.extend(self._check_amount(record))
        issues.extend(self._check_party(record))
        issues.extend(self._check_date(record, today or dt.date.today()))

        has_errors = any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=not has_errors, issues=issues)

    def _check_amount(self, record: TransactionRecord) -> list[ValidationIssue]:
        issues = []

        if record.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="No amount was recognized in the utterance",
                severity="error",
                suggested_fix="Say the amount again, e.g. '500 rupaye'",
            ))
            return issues

        max_amount = Decimal(str(self._settings.max_transaction_amount_inr))
        if record.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ₹{record.amount:,.2f} is unusually large",
                severity="warning",
                suggested_fix="Check if the amount was heard correctly",
            ))

        return issues

    def _check_party(self, record: TransactionRecord) -> list[ValidationIssue]:
        if record.type in _LOAN_TYPES and not record.party_name:
            return [ValidationIssue(
                field="party_name",
                issue_type="missing",
                message="Loan recorded without a party name",
                severity="warning",
                suggested_fix="Mention who the loan is from or to, e.g. 'Ramesh se'",
            )]
        return []

    def _check_date(
        self,
        record: TransactionRecord,
        today: dt.date,
    ) -> list[ValidationIssue]:
        if record.date == "today":
            return []

        if dt.date.fromisoformat(record.date) > today:
            return [ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Transaction date {record.date} is in the future",
                severity="warning",
                suggested_fix="Check the date",
            )]
        return []
