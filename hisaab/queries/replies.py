"""Short spoken/printed replies for recorded transactions and query results."""

from decimal import Decimal

from hisaab.models.ledger import QueryResult, StoredTransaction
from hisaab.models.records import QueryAction, TimeRange, TransactionRecord, TransactionType

_PERIOD_LABELS = {
    TimeRange.TODAY: "Today's",
    TimeRange.YESTERDAY: "Yesterday's",
    TimeRange.THIS_WEEK: "This week's",
    TimeRange.THIS_MONTH: "This month's",
}


def format_rupees(amount: Decimal) -> str:
    """₹500 for whole amounts, ₹12.50 otherwise."""
    amount = abs(amount)
    if amount == amount.to_integral_value():
        return f"₹{int(amount)}"
    return f"₹{amount:.2f}"


def format_transaction_reply(record: TransactionRecord) -> str:
    """Confirmation for a transaction that was just recorded."""
    amount = format_rupees(record.amount)
    party = record.party_name or "Unknown"

    if record.type == TransactionType.SALE:
        return f"Sale recorded: {amount}"
    if record.type == TransactionType.PURCHASE:
        return f"Purchase recorded: {amount}"
    if record.type == TransactionType.LOAN_GIVEN:
        return f"Loan given to {party}: {amount}"
    if record.type == TransactionType.LOAN_TAKEN:
        return f"Loan taken from {party}: {amount}"
    if record.type == TransactionType.EXPENSE:
        return f"Expense recorded: {amount}"
    return f"Transaction recorded: {amount}"


def format_query_reply(result: QueryResult) -> str:
    """Answer a query from its computed result. Never adds numbers of its own."""
    if not result.success:
        return result.error_message or "No result found"

    amount = format_rupees(result.total)
    period = _PERIOD_LABELS.get(result.time_range, "Total")

    if result.action == QueryAction.TOTAL_SALES:
        return f"{period} sales: {amount}"
    if result.action == QueryAction.TOTAL_EXPENSES:
        return f"{period} expenses: {amount}"
    if result.action == QueryAction.OVERALL_SUMMARY:
        label = "profit" if result.total >= 0 else "loss"
        return f"Overall {label}: {amount}"

    # Balance: positive means the party owes the shopkeeper
    if result.total > 0:
        return f"{result.party_name} owes you: {amount}"
    if result.total < 0:
        return f"You owe {result.party_name}: {amount}"
    return f"Balance with {result.party_name} is clear"


def format_read_aloud(transaction: StoredTransaction) -> str:
    """Read a stored transaction back to the user."""
    notes = transaction.notes or "not available"
    return f"Transaction: {format_rupees(transaction.amount)}, notes: {notes}"
