"""Word-bounded keyword matching shared by the classifier stages."""

import re
from functools import lru_cache
from typing import Iterable, Optional


@lru_cache(maxsize=1024)
def _phrase_pattern(phrase: str) -> re.Pattern:
    words = (re.escape(word) for word in phrase.split())
    return re.compile(r"(?<!\w)" + r"\s+".join(words) + r"(?!\w)")


def contains_phrase(text: str, phrase: str) -> bool:
    """True if the phrase occurs in text as whole words ("kal" does not match "nikal")."""
    return _phrase_pattern(phrase).search(text) is not None


def find_phrase(text: str, phrases: Iterable[str]) -> Optional[str]:
    """Return the first phrase, in table order, that occurs in text."""
    for phrase in phrases:
        if contains_phrase(text, phrase):
            return phrase
    return None


def matched_phrases(text: str, phrases: Iterable[str]) -> list[str]:
    return [phrase for phrase in phrases if contains_phrase(text, phrase)]
