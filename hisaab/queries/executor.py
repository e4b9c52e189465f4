"""
Query Execution Engine

DESIGN DECISION: Query execution is DETERMINISTIC.
The classifier (rules or model) converts an utterance to a QueryRecord.
This engine executes that record on actual stored transactions.

At no point does a classifier answer a question itself.
Every number in a reply comes from what this engine returns from storage.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from hisaab.models.ledger import QueryResult, StoredTransaction
from hisaab.models.records import (
    Direction,
    QueryAction,
    QueryRecord,
    TimeRange,
    TransactionType,
)
from hisaab.services.storage import LedgerStorageInterface


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


def resolve_time_range(
    time_range: Optional[TimeRange],
    today: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """
    Convert a relative time range to an inclusive date window.

    This is DETERMINISTIC. None and ALL mean no date filter.
    Weeks start on Monday; "this week" and "this month" end today.
    """
    today = today or date.today()

    if time_range is None or time_range == TimeRange.ALL:
        return None, None
    if time_range == TimeRange.TODAY:
        return today, today
    if time_range == TimeRange.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if time_range == TimeRange.THIS_WEEK:
        return today - timedelta(days=today.weekday()), today
    if time_range == TimeRange.THIS_MONTH:
        return today.replace(day=1), today

    raise QueryExecutionError(f"Unknown time range: {time_range}")


def _total(transactions: list[StoredTransaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))


class QueryExecutor:
    """
    Executes QueryRecords against ledger storage.

    GUARANTEES:
    - Only returns real data from storage
    - Never invents or estimates
    - A failed query is a failed QueryResult, not an exception
    """

    def __init__(self, storage: LedgerStorageInterface):
        self._storage = storage

    async def execute(
        self,
        query: QueryRecord,
        today: Optional[date] = None,
    ) -> QueryResult:
        """
        Execute a query record and return results.

        Args:
            query: The classified query
            today: Reference date for relative time ranges (defaults to today)
        """
        try:
            date_from, date_to = resolve_time_range(query.time_range, today)

            if query.action == QueryAction.TOTAL_SALES:
                return await self._execute_type_total(
                    query, TransactionType.SALE, date_from, date_to
                )
            elif query.action == QueryAction.TOTAL_EXPENSES:
                return await self._execute_type_total(
                    query, TransactionType.EXPENSE, date_from, date_to
                )
            elif query.action == QueryAction.OVERALL_SUMMARY:
                return await self._execute_summary(query, date_from, date_to)
            elif query.action == QueryAction.BALANCE:
                return await self._execute_balance(query, date_from, date_to)
            else:
                raise QueryExecutionError(f"Unsupported query action: {query.action}")

        except Exception as e:
            return QueryResult(
                action=query.action,
                time_range=query.time_range,
                party_name=query.party_name,
                success=False,
                error_message=str(e),
                query_description=f"Query failed: {str(e)}",
            )

    async def _execute_type_total(
        self,
        query: QueryRecord,
        type_: TransactionType,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> QueryResult:
        """Sum every transaction of one type in the window."""
        transactions = await self._storage.list_transactions(
            type_=type_,
            date_from=date_from,
            date_to=date_to,
        )

        desc_parts = [f"Total {type_.value}"]
        range_str = self._date_range_str(date_from, date_to)
        if range_str:
            desc_parts.append(range_str)

        return QueryResult(
            action=query.action,
            time_range=query.time_range,
            success=True,
            total=_total(transactions),
            result_count=len(transactions),
            date_from=date_from,
            date_to=date_to,
            query_description=" ".join(desc_parts),
        )

    async def _execute_summary(
        self,
        query: QueryRecord,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> QueryResult:
        """Money in minus money out. Positive is profit."""
        incoming = await self._storage.list_transactions(
            direction=Direction.IN, date_from=date_from, date_to=date_to
        )
        outgoing = await self._storage.list_transactions(
            direction=Direction.OUT, date_from=date_from, date_to=date_to
        )

        desc_parts = ["Net of money in and money out"]
        range_str = self._date_range_str(date_from, date_to)
        if range_str:
            desc_parts.append(range_str)

        return QueryResult(
            action=query.action,
            time_range=query.time_range,
            success=True,
            total=_total(incoming) - _total(outgoing),
            result_count=len(incoming) + len(outgoing),
            date_from=date_from,
            date_to=date_to,
            query_description=" ".join(desc_parts),
        )

    async def _execute_balance(
        self,
        query: QueryRecord,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> QueryResult:
        """
        Balance with one party: what went out to them minus what came in.

        Positive means the party owes the shopkeeper.
        """
        if not query.party_name:
            raise QueryExecutionError("Balance query needs a party name")

        transactions = await self._storage.list_transactions(
            party_name=query.party_name,
            date_from=date_from,
            date_to=date_to,
        )
        balance = Decimal("0") - sum((t.signed_amount for t in transactions), Decimal("0"))

        return QueryResult(
            action=query.action,
            time_range=query.time_range,
            party_name=query.party_name,
            success=True,
            total=balance,
            result_count=len(transactions),
            date_from=date_from,
            date_to=date_to,
            query_description=f"Balance with {query.party_name}",
        )

    def _date_range_str(
        self,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> str:
        """Format date range for description."""
        if date_from and date_to:
            if date_from == date_to:
                return f"on {date_from.strftime('%d %b %Y')}"
            return f"from {date_from.strftime('%d %b')} to {date_to.strftime('%d %b %Y')}"
        elif date_from:
            return f"from {date_from.strftime('%d %b %Y')}"
        elif date_to:
            return f"until {date_to.strftime('%d %b %Y')}"
        return ""
