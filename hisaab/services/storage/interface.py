"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger in memory for the CLI and for tests
2. Swap in a database or an on-device store later
3. Keep the classifier and the query layer decoupled from storage

The interface is intentionally simple - we're not building a full ORM.
Just the operations a voice ledger needs.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from hisaab.models.audit import AuditEvent
from hisaab.models.ledger import StoredTransaction
from hisaab.models.records import Direction, TransactionType


class LedgerStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def save_transaction(self, transaction: StoredTransaction) -> bool:
        """
        Save a transaction to storage.

        Returns:
            True if saved successfully

        Raises:
            DuplicateError: If a transaction with the same id exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: UUID) -> Optional[StoredTransaction]:
        """
        Retrieve a transaction by its ID.

        Returns:
            The transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_transaction(self, transaction: StoredTransaction) -> bool:
        """
        Replace an existing transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if deleted, False if there was nothing to delete
        """
        pass

    @abstractmethod
    async def list_transactions(
        self,
        direction: Optional[Direction] = None,
        type_: Optional[TransactionType] = None,
        party_name: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[StoredTransaction]:
        """
        List transactions with optional filters.

        Args:
            direction: Filter by money-flow direction
            type_: Filter by transaction type
            party_name: Filter by counterparty (case-insensitive exact match)
            date_from: Transactions on or after this date
            date_to: Transactions on or before this date
            limit: Maximum number of results

        Returns:
            Matching transactions, newest first
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event to the log."""
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (one utterance).

        Returns:
            Related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
