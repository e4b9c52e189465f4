"""
Utterance normalization.

Canonicalizes raw text before any keyword matching happens, so the
keyword tables only need to know one spelling per word.
"""

import re

from hisaab.classifier.vocabulary import CURRENCY_SYMBOLS, SPELLING_FOLDS

_FOLDS = tuple((re.compile(pattern), replacement) for pattern, replacement in SPELLING_FOLDS)
_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d)")
_WHITESPACE = re.compile(r"\s+")


def normalize(raw: str) -> str:
    """
    Canonicalize an utterance.

    Lowercases, replaces currency symbols with a space, drops digit
    grouping commas ("1,50,000" -> "150000"), folds spelling variants
    ("udhaar" -> "udhar", "Rs." -> "rupaye") and collapses whitespace.

    Pure and idempotent: normalize(normalize(x)) == normalize(x).
    """
    if not raw:
        return ""

    text = raw.lower()
    for symbol in CURRENCY_SYMBOLS:
        text = text.replace(symbol, " ")
    text = _THOUSANDS_SEPARATOR.sub("", text)

    for pattern, replacement in _FOLDS:
        text = pattern.sub(f" {replacement} ", text)

    return _WHITESPACE.sub(" ", text).strip()


def tokenize(text: str) -> list[str]:
    """
    Split on whitespace and strip surrounding punctuation from each token.

    Decimal points inside numbers survive ("2.5" stays one token).
    """
    tokens = []
    for raw_token in text.split():
        token = raw_token.strip(".,!?;:'\"()[]{}")
        if token:
            tokens.append(token)
    return tokens
