"""
In-memory storage backends.

Used by the CLI and the test suite. Records live for the lifetime of the
process; an asyncio.Lock serializes writers so concurrent flows never
interleave a read-modify-write.
"""

import asyncio
from datetime import date
from typing import Optional
from uuid import UUID

from hisaab.models.audit import AuditEvent
from hisaab.models.ledger import StoredTransaction
from hisaab.models.records import Direction, TransactionType
from hisaab.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    LedgerStorageInterface,
    NotFoundError,
)


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Transaction storage held in a dict keyed by transaction id."""

    def __init__(self):
        self._transactions: dict[UUID, StoredTransaction] = {}
        self._lock = asyncio.Lock()

    async def save_transaction(self, transaction: StoredTransaction) -> bool:
        async with self._lock:
            if transaction.id in self._transactions:
                raise DuplicateError(f"Transaction {transaction.id} already exists")
            self._transactions[transaction.id] = transaction
        return True

    async def get_transaction(self, transaction_id: UUID) -> Optional[StoredTransaction]:
        return self._transactions.get(transaction_id)

    async def update_transaction(self, transaction: StoredTransaction) -> bool:
        async with self._lock:
            if transaction.id not in self._transactions:
                raise NotFoundError(f"Transaction {transaction.id} not found")
            self._transactions[transaction.id] = transaction
        return True

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        async with self._lock:
            return self._transactions.pop(transaction_id, None) is not None

    async def list_transactions(
        self,
        direction: Optional[Direction] = None,
        type_: Optional[TransactionType] = None,
        party_name: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[StoredTransaction]:
        party = party_name.lower() if party_name else None

        matches = []
        for txn in self._transactions.values():
            if direction is not None and txn.direction != direction:
                continue
            if type_ is not None and txn.type != type_:
                continue
            if party is not None and (txn.party_name or "").lower() != party:
                continue
            if date_from is not None and txn.date < date_from:
                continue
            if date_to is not None and txn.date > date_to:
                continue
            matches.append(txn)

        matches.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        if limit is not None:
            matches = matches[:limit]
        return matches


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
