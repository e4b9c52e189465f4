"""
Update-command classification for an already recorded transaction.

Commands are spoken while a transaction is selected:
    "isko delete kar do"          -> delete
    "sunao"                       -> read aloud
    "iska 500 kar do"             -> modify amount
    "likho ki Ramesh ka maal"     -> modify notes
"""

import re
from typing import Optional

from hisaab.classifier.matching import find_phrase
from hisaab.classifier.normalizer import normalize
from hisaab.classifier.numerals import extract_amount
from hisaab.models.ledger import UNCLEAR_MODIFICATION, TransactionUpdateCommand, UpdateIntent

DELETE_MARKERS = ("delete", "hata do", "mita do", "remove this entry")
READ_ALOUD_MARKERS = ("read aloud", "sunao", "suna do", "bolkar batao", "hear this")
MODIFY_MARKERS = ("badal do", "change karo")

# Explicit note setting, tried in order against the text as spoken
_NOTE_PATTERNS = (
    re.compile(r"\blikho\s+(?:ki\s+)?(.+)", re.IGNORECASE),
    re.compile(r"\b(?:description|notes)\s+(?:change karo|badal do)?\s*,?\s*(.+)", re.IGNORECASE),
    re.compile(r"(.+)\s+likho$", re.IGNORECASE),
)

# "iska 500 kar do", "amount 200", "300 rupaye": only the amount changes
_AMOUNT_ONLY = re.compile(
    r"^\s*(?:amount|is|iska)?\s*\d+(?:\.\d+)?\s*(?:kar do|rupaye)?\s*$"
)

_HAS_DIGIT = re.compile(r"\d")


def _extract_notes(original: str, normalized: str) -> Optional[str]:
    for pattern in _NOTE_PATTERNS:
        match = pattern.search(original)
        if match:
            notes = match.group(1).strip()
            if notes:
                return notes

    if _AMOUNT_ONLY.match(normalized):
        return None

    # A sentence with a number in it describes the whole transaction
    if _HAS_DIGIT.search(normalized):
        return original

    if find_phrase(normalized, MODIFY_MARKERS) is not None:
        return original

    return None


def classify_update_command(text: str) -> TransactionUpdateCommand:
    """
    Classify a spoken edit command.

    Delete markers win over read-aloud markers, which win over modify.
    A command with nothing usable becomes a modify carrying the
    "unclear modification" note so the caller can ask again.
    """
    original = (text or "").strip()
    normalized = normalize(original)

    if find_phrase(normalized, DELETE_MARKERS) is not None:
        return TransactionUpdateCommand(intent=UpdateIntent.DELETE)

    if find_phrase(normalized, READ_ALOUD_MARKERS) is not None:
        return TransactionUpdateCommand(intent=UpdateIntent.READ_ALOUD)

    amount = extract_amount(normalized)
    notes = _extract_notes(original, normalized)

    if amount > 0 or notes is not None:
        return TransactionUpdateCommand(
            intent=UpdateIntent.MODIFY,
            amount=amount if amount > 0 else None,
            notes=notes[:1000] if notes is not None else None,
        )

    return TransactionUpdateCommand(intent=UpdateIntent.MODIFY, notes=UNCLEAR_MODIFICATION)
