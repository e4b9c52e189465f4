"""Query execution package."""

from hisaab.queries.executor import QueryExecutionError, QueryExecutor, resolve_time_range
from hisaab.queries.replies import (
    format_query_reply,
    format_read_aloud,
    format_rupees,
    format_transaction_reply,
)

__all__ = [
    "QueryExecutionError",
    "QueryExecutor",
    "format_query_reply",
    "format_read_aloud",
    "format_rupees",
    "format_transaction_reply",
    "resolve_time_range",
]
