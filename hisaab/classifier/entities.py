"""
Party name extraction.

Hinglish marks the counterparty with a postposition right after the name:
    "Ramesh se 500 liye"   -> from Ramesh
    "Sunil ko 300 diya"    -> to Sunil
    "Ramesh ka balance"    -> Ramesh's balance

Patterns are tried in that order. The word in front of the postposition
is rejected if it is a known common word ("aaj ka", "bijli ka", "maine ko").

Only that one word is taken: "Ramesh Kumar se" yields "Kumar". The word
before it is as often a filler ("phir", "wale") as a first name.
"""

import re
from typing import Optional

from hisaab.classifier.vocabulary import PARTY_PREPOSITIONS, PARTY_STOPLIST

# Same limit as the party_name field of the records
MAX_PARTY_NAME_LENGTH = 100

# Letters only: "500 se" must never yield a party called "500"
_PATTERNS = tuple(
    re.compile(r"(?<!\w)([^\W\d_]+)\s+" + preposition + r"(?!\w)", re.IGNORECASE)
    for preposition in PARTY_PREPOSITIONS
)


def _title_case(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split())


def extract_party_name(text: str) -> Optional[str]:
    """
    Extract the counterparty name, title-cased, or None.

    Every occurrence of a pattern is considered before moving on to the
    next pattern, so "aaj ramesh se" still finds Ramesh. A letter run
    longer than MAX_PARTY_NAME_LENGTH is not a name and is skipped.
    """
    if not text:
        return None

    for pattern in _PATTERNS:
        for match in pattern.finditer(text):
            candidate = match.group(1)
            if len(candidate) > MAX_PARTY_NAME_LENGTH:
                continue
            if candidate.lower() in PARTY_STOPLIST:
                continue
            return _title_case(candidate)

    return None
