"""
Query classification and time resolution.

A query is mapped to one of four aggregations. Category checks run in
a fixed order: balance, sales, expenses, profit/loss,
overall/summary, and finally a default overall summary.
"""

from typing import Optional

import structlog

from hisaab.classifier.entities import extract_party_name
from hisaab.classifier.matching import find_phrase
from hisaab.classifier.normalizer import tokenize
from hisaab.classifier.vocabulary import (
    AFTER_MARKERS,
    ALL_TIME_MARKERS,
    BALANCE_PHRASES,
    EXPENSE_QUERY_WORDS,
    MONTH_MARKERS,
    PROFIT_LOSS_WORDS,
    SALES_QUERY_WORDS,
    SUMMARY_WORDS,
    TODAY_MARKERS,
    WEEK_MARKERS,
    YESTERDAY_MARKERS,
)
from hisaab.models.records import ClassificationStage, QueryAction, QueryRecord, TimeRange

logger = structlog.get_logger(__name__)


def extract_time_range(text: str, default: TimeRange = TimeRange.TODAY) -> TimeRange:
    """
    Resolve the time window a query asks about.

    Checked in order: today, yesterday, this week, this month, all time.
    "kal" only means yesterday when no "baad"/"after" follows it
    ("kal ke baad" is not yesterday).
    """
    words = set(tokenize(text))

    if words & TODAY_MARKERS:
        return TimeRange.TODAY
    if words & YESTERDAY_MARKERS and not words & AFTER_MARKERS:
        return TimeRange.YESTERDAY
    if words & WEEK_MARKERS:
        return TimeRange.THIS_WEEK
    if words & MONTH_MARKERS:
        return TimeRange.THIS_MONTH
    if find_phrase(text, ALL_TIME_MARKERS) is not None:
        return TimeRange.ALL
    return default


def classify_query(
    text: str,
    original: Optional[str] = None,
) -> tuple[QueryRecord, ClassificationStage]:
    """
    Map a query utterance to a QueryRecord.

    Args:
        text: Normalized, lowercased utterance
        original: The utterance as spoken, used for party extraction

    Returns:
        The record and QUERY, or QUERY_DEFAULT when no category was recognized.
    """
    words = set(tokenize(text))
    source = original if original is not None else text

    # Balance phrasing is a balance query even when no party was heard;
    # execution reports the missing party.
    if find_phrase(text, BALANCE_PHRASES) is not None:
        party_name = extract_party_name(source)
        if party_name is None:
            logger.debug("balance_query_without_party", text=text)
        return (
            QueryRecord(action=QueryAction.BALANCE, party_name=party_name),
            ClassificationStage.QUERY,
        )

    if words & SALES_QUERY_WORDS:
        return (
            QueryRecord(action=QueryAction.TOTAL_SALES, time_range=extract_time_range(text)),
            ClassificationStage.QUERY,
        )

    if words & EXPENSE_QUERY_WORDS:
        return (
            QueryRecord(action=QueryAction.TOTAL_EXPENSES, time_range=extract_time_range(text)),
            ClassificationStage.QUERY,
        )

    if words & PROFIT_LOSS_WORDS:
        return (
            QueryRecord(
                action=QueryAction.OVERALL_SUMMARY,
                time_range=extract_time_range(text, default=TimeRange.ALL),
            ),
            ClassificationStage.QUERY,
        )

    if words & SUMMARY_WORDS:
        return (
            QueryRecord(action=QueryAction.OVERALL_SUMMARY, time_range=TimeRange.ALL),
            ClassificationStage.QUERY,
        )

    return (
        QueryRecord(
            action=QueryAction.OVERALL_SUMMARY,
            time_range=extract_time_range(text, default=TimeRange.ALL),
        ),
        ClassificationStage.QUERY_DEFAULT,
    )
