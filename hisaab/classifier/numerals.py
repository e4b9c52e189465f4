"""
Amount extraction with Hinglish numeral support.

DESIGN DECISION: Amounts are resolved by an ordered cascade, first match
wins. Summing every numeral word in a sentence over-counts ("paanch sau"
would become 5 + 100 = 105), so multiplier words are only ever combined
with the number directly in front of them.

Cascade:
1. A literal of 4+ digits ("4000")
2. Digits + multiplier word ("5 hazaar", "2.5 lakh")
3. Numeral word + multiplier word ("paanch sau", "ek lakh pachaas hazaar")
4. A literal of 3 digits
5. A literal of 1-2 digits
6. Standalone multiplier words ("sau" alone is 100)
7. Nothing found: 0

Small numeral words on their own ("paanch") deliberately resolve to 0.
A bare "do" or "das" is far more often a verb or filler than an amount.
"""

import re
from decimal import Decimal
from typing import Optional

from hisaab.classifier.normalizer import tokenize
from hisaab.classifier.vocabulary import (
    MULTIPLIER_WORDS,
    NUMERAL_WORDS,
    UNIT_NUMERAL_WORDS,
)

ZERO = Decimal("0")

_FRACTION = r"(?:\.\d+)?"
_NOT_AFTER_NUMBER = r"(?<![\d.])"
_NOT_BEFORE_NUMBER = r"(?!\.?\d)"

_FOUR_PLUS_DIGITS = re.compile(_NOT_AFTER_NUMBER + r"\d{4,}" + _FRACTION + _NOT_BEFORE_NUMBER)
_THREE_DIGITS = re.compile(_NOT_AFTER_NUMBER + r"\d{3}" + _FRACTION + _NOT_BEFORE_NUMBER)
_ONE_TWO_DIGITS = re.compile(_NOT_AFTER_NUMBER + r"\d{1,2}" + _FRACTION + _NOT_BEFORE_NUMBER)

_DIGITS_WITH_MULTIPLIER = re.compile(
    _NOT_AFTER_NUMBER
    + r"(\d+" + _FRACTION + r")\s*("
    + "|".join(sorted(MULTIPLIER_WORDS, key=len, reverse=True))
    + r")(?!\w)"
)


def _first_literal(pattern: re.Pattern, text: str) -> Optional[Decimal]:
    match = pattern.search(text)
    if match is None:
        return None
    return Decimal(match.group(0))


def _digits_with_multipliers(text: str) -> Optional[Decimal]:
    """Sum every "<digits> <multiplier>" group: "2 lakh 50 hazaar" -> 250000."""
    matches = _DIGITS_WITH_MULTIPLIER.findall(text)
    if not matches:
        return None
    return sum(
        (Decimal(digits) * MULTIPLIER_WORDS[word] for digits, word in matches),
        ZERO,
    )


def _numeral_words_with_multipliers(tokens: list[str]) -> Optional[Decimal]:
    """Sum every "<numeral word> <multiplier>" pair: "do hazaar paanch sau" -> 2500."""
    total = ZERO
    found = False
    i = 0
    while i < len(tokens) - 1:
        unit = UNIT_NUMERAL_WORDS.get(tokens[i])
        multiplier = MULTIPLIER_WORDS.get(tokens[i + 1])
        if unit is not None and multiplier is not None:
            total += Decimal(unit * multiplier)
            found = True
            i += 2
        else:
            i += 1
    return total if found else None


def _standalone_multipliers(tokens: list[str]) -> Optional[Decimal]:
    values = [MULTIPLIER_WORDS[token] for token in tokens if token in MULTIPLIER_WORDS]
    if not values:
        return None
    return Decimal(sum(values))


def extract_amount(text: str) -> Decimal:
    """
    Extract a monetary amount from (normalized) utterance text.

    Never raises; returns Decimal("0") when no amount is found.
    """
    if not text:
        return ZERO

    lower = text.lower()
    tokens = tokenize(lower)

    cascade = (
        lambda: _first_literal(_FOUR_PLUS_DIGITS, lower),
        lambda: _digits_with_multipliers(lower),
        lambda: _numeral_words_with_multipliers(tokens),
        lambda: _first_literal(_THREE_DIGITS, lower),
        lambda: _first_literal(_ONE_TWO_DIGITS, lower),
        lambda: _standalone_multipliers(tokens),
    )
    for step in cascade:
        amount = step()
        if amount is not None:
            return amount

    return ZERO


def is_numeral_token(token: str) -> bool:
    """True for digit literals and numeral words ("500", "2.5", "paanch", "sau")."""
    if token in NUMERAL_WORDS:
        return True
    try:
        Decimal(token)
    except ArithmeticError:
        return False
    return token[0].isdigit()
