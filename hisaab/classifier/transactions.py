"""
Transaction classification: (type, direction) for a non-query utterance.

The cascade below is ordered from the most specific evidence to the
least. Each stage short-circuits, so a later, vaguer rule never overrides
an earlier, sharper one:

    1. loan phrases            ("udhar liya", "diya udhar")
    2. generic loan mention    (verb, then postposition, then default)
    3. expense keywords        (with the sale proximity tie-break)
    4. sale keywords
    5. credit verbs            ("mila", "aaya", "jama")
    6. debit verbs             ("bhar diya", "payment"), loans excluded
    7. standalone giving verb  ("diya" without a loan word)
    8. standalone taking verb  ("liya" without a loan word)
    9. party postposition      ("X ko" -> out, "X se" -> in)
   10. completion marker       ("hui", "hua")
   11. fallback                (expense, out)

DESIGN DECISION: The fallback is (expense, out). An unrecognized utterance
is booked as money going out rather than inventing income that was never
earned. It is reported with the lowest confidence so callers can ask the
user to confirm.
"""

from typing import Optional

import structlog

from hisaab.classifier.matching import contains_phrase, find_phrase, matched_phrases
from hisaab.classifier.normalizer import tokenize
from hisaab.classifier.numerals import is_numeral_token
from hisaab.classifier.vocabulary import (
    COMPLETION_MARKERS,
    CREDIT_VERBS,
    DEBIT_VERBS,
    EXPENSE_KEYWORDS,
    GIVING_VERBS,
    LOAN_GIVEN_PHRASES,
    LOAN_TAKEN_PHRASES,
    LOAN_WORDS,
    SALE_KEYWORDS,
    TAKING_VERBS,
)
from hisaab.models.records import Classification, ClassificationStage, TransactionType

logger = structlog.get_logger(__name__)

DEFAULT_PROXIMITY_WINDOW = 3

# "saman liya" is buying stock, not receiving money
_GOODS_WORDS = ("saman", "stock", "maal")

_SALE = Classification.of(TransactionType.SALE)
_EXPENSE = Classification.of(TransactionType.EXPENSE)
_LOAN_TAKEN = Classification.of(TransactionType.LOAN_TAKEN)
_LOAN_GIVEN = Classification.of(TransactionType.LOAN_GIVEN)


def _has_any_word(tokens: list[str], words) -> Optional[str]:
    for token in tokens:
        if token in words:
            return token
    return None


def _phrase_positions(tokens: list[str], phrase: str) -> list[int]:
    """Indices where the phrase's words start in the token list."""
    words = phrase.split()
    width = len(words)
    return [
        i for i in range(len(tokens) - width + 1)
        if tokens[i:i + width] == words
    ]


def _near_numeral(
    tokens: list[str],
    phrases: list[str],
    numeral_positions: list[int],
    window: int,
) -> bool:
    """True if any occurrence of any phrase lies within `window` tokens of a numeral."""
    for phrase in phrases:
        for position in _phrase_positions(tokens, phrase):
            if any(abs(position - n) <= window for n in numeral_positions):
                return True
    return False


def sale_wins_proximity(
    tokens: list[str],
    expense_matches: list[str],
    sale_matches: list[str],
    window: int = DEFAULT_PROXIMITY_WINDOW,
) -> bool:
    """
    Proximity tie-break between an expense keyword and a sale keyword.

    The sale reading wins only when a sale keyword sits within the window
    of a numeral token and no expense keyword does. Neither or both
    qualifying leaves the expense reading in place.
    """
    numeral_positions = [i for i, token in enumerate(tokens) if is_numeral_token(token)]
    if not numeral_positions:
        return False

    sale_near = _near_numeral(tokens, sale_matches, numeral_positions, window)
    expense_near = _near_numeral(tokens, expense_matches, numeral_positions, window)
    return sale_near and not expense_near


def classify_transaction(
    text: str,
    party_name: Optional[str] = None,
    proximity_window: int = DEFAULT_PROXIMITY_WINDOW,
) -> tuple[Classification, ClassificationStage]:
    """
    Classify a normalized, lowercased utterance into (type, direction).

    Args:
        text: Output of normalize()
        party_name: Counterparty already extracted from the utterance, if any
        proximity_window: Token distance used by the expense/sale tie-break

    Returns:
        The classification and the cascade stage that produced it.
        Never raises; unmatched input lands on the fallback stage.
    """
    tokens = tokenize(text)
    has_loan_word = _has_any_word(tokens, LOAN_WORDS) is not None

    # 1. Loan phrases
    phrase = find_phrase(text, LOAN_TAKEN_PHRASES)
    if phrase is not None:
        logger.debug("loan_taken_phrase", phrase=phrase)
        return _LOAN_TAKEN, ClassificationStage.LOAN_PHRASE

    phrase = find_phrase(text, LOAN_GIVEN_PHRASES)
    if phrase is not None:
        logger.debug("loan_given_phrase", phrase=phrase)
        return _LOAN_GIVEN, ClassificationStage.LOAN_PHRASE

    # 2. Generic loan mention
    if has_loan_word:
        if _has_any_word(tokens, TAKING_VERBS):
            return _LOAN_TAKEN, ClassificationStage.LOAN_VERB
        if _has_any_word(tokens, GIVING_VERBS):
            return _LOAN_GIVEN, ClassificationStage.LOAN_VERB
        if party_name is not None:
            if contains_phrase(text, "se"):
                return _LOAN_TAKEN, ClassificationStage.LOAN_PREPOSITION
            if contains_phrase(text, "ko"):
                return _LOAN_GIVEN, ClassificationStage.LOAN_PREPOSITION
        logger.debug("loan_direction_defaulted", text=text)
        return _LOAN_GIVEN, ClassificationStage.LOAN_DEFAULT

    # 3. Expense keywords, unless a sale keyword is the one next to the amount
    expense_matches = matched_phrases(text, EXPENSE_KEYWORDS)
    sale_matches = matched_phrases(text, SALE_KEYWORDS)
    if expense_matches:
        if sale_matches and sale_wins_proximity(
            tokens, expense_matches, sale_matches, proximity_window
        ):
            logger.debug(
                "sale_preferred_by_proximity",
                expense=expense_matches[0],
                sale=sale_matches[0],
            )
            return _SALE, ClassificationStage.SALE_BY_PROXIMITY
        logger.debug("expense_keyword", keyword=expense_matches[0])
        return _EXPENSE, ClassificationStage.EXPENSE_KEYWORD

    # 4. Sale keywords
    if sale_matches:
        logger.debug("sale_keyword", keyword=sale_matches[0])
        return _SALE, ClassificationStage.SALE_KEYWORD

    # 5. Money coming in
    if find_phrase(text, CREDIT_VERBS) is not None:
        return _SALE, ClassificationStage.CREDIT_VERB

    # 6. Money going out
    if find_phrase(text, DEBIT_VERBS) is not None:
        return _EXPENSE, ClassificationStage.DEBIT_VERB

    # 7. Giving without a loan word
    if _has_any_word(tokens, GIVING_VERBS):
        return _EXPENSE, ClassificationStage.GIVING_VERB

    # 8. Taking without a loan word or goods
    if _has_any_word(tokens, TAKING_VERBS) and _has_any_word(tokens, _GOODS_WORDS) is None:
        return _SALE, ClassificationStage.TAKING_VERB

    # 9. Direction from the postposition after the party
    if party_name is not None:
        if contains_phrase(text, "ko"):
            return _EXPENSE, ClassificationStage.PARTY_PREPOSITION
        if contains_phrase(text, "se"):
            return _SALE, ClassificationStage.PARTY_PREPOSITION

    # 10. "hui"/"hua": something happened, usually a sale
    if _has_any_word(tokens, COMPLETION_MARKERS):
        return _SALE, ClassificationStage.COMPLETION_MARKER

    # 11. Nothing matched
    logger.warning("classification_no_keyword_match", text=text)
    return _EXPENSE, ClassificationStage.FALLBACK
