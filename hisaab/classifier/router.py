"""
Intent routing: is this utterance a question or a transaction?

DESIGN DECISION: Query detection runs BEFORE transaction classification.
Transaction words show up inside questions all the time ("aaj ki bikri
kitni hui"), so a question has to be intercepted before "bikri" gets a
chance to turn it into a sale.
"""

from typing import Optional

from hisaab.classifier.matching import contains_phrase, find_phrase
from hisaab.classifier.vocabulary import CATEGORY_WORDS, QUERY_KEYWORDS

# Longest first so "how much" is reported rather than a shorter overlap
_QUERY_KEYWORDS = tuple(sorted(QUERY_KEYWORDS, key=len, reverse=True))
_CATEGORY_WORDS = tuple(sorted(CATEGORY_WORDS))


def query_signal(text: str) -> Optional[str]:
    """Return what made the text a query, or None if it is not one."""
    keyword = find_phrase(text, _QUERY_KEYWORDS)
    if keyword is not None:
        return keyword

    # "total kharcha" asks; "500 kharcha" records
    if contains_phrase(text, "total"):
        category = find_phrase(text, _CATEGORY_WORDS)
        if category is not None:
            return f"total {category}"

    if "?" in text:
        return "?"

    return None


def is_query(text: str) -> bool:
    """True if the (normalized, lowercased) utterance asks about records."""
    return query_signal(text) is not None
