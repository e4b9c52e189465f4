"""
Main Orchestrator for Hisaab

This module ties together all the components and defines the
end-to-end flows for:
1. Utterance (text -> classify -> validate -> save, or -> execute query)
2. Update (command -> delete / read aloud / modify an existing transaction)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is saved that failed validation
- No query answers without data lookup
- Every step is audited

Classification is CPU-only and synchronous. It runs in a worker thread
so an event loop serving several users is never blocked by it, or by a
slow model call.
"""

import asyncio
import datetime as dt
from typing import Optional
from uuid import UUID

from hisaab.audit import AuditLogger, create_correlation_id
from hisaab.classifier import (
    RuleBasedClassifier,
    UtteranceClassifier,
    classify_update_command,
    create_classifier,
)
from hisaab.config import Settings, get_settings
from hisaab.models.ledger import (
    FlowResponse,
    StoredTransaction,
    TransactionUpdateCommand,
    UpdateIntent,
)
from hisaab.models.records import ClassificationOutcome, QueryRecord, TransactionRecord
from hisaab.queries import (
    QueryExecutor,
    format_query_reply,
    format_read_aloud,
    format_transaction_reply,
)
from hisaab.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    NotFoundError,
)
from hisaab.validation import TransactionValidator


class LedgerFlow:
    """
    Orchestrates the voice ledger flows.

    Flow for one utterance:
    1. Classify    -> TransactionRecord or QueryRecord
    2a. Query      -> execute on storage -> reply from the numbers found
    2b. Transaction -> validate -> save -> confirmation reply

    A transaction that fails validation is NOT saved; the reply asks
    the user to repeat instead.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        classifier: Optional[UtteranceClassifier] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self._storage = ledger_storage
        self._classifier = classifier or create_classifier(settings)
        self._validator = validator or TransactionValidator(settings.app)
        self._query_executor = QueryExecutor(ledger_storage)
        self._audit_logger = audit_logger
        self._low_confidence_threshold = settings.classifier.low_confidence_threshold

    async def classify(
        self,
        utterance: str,
        correlation_id: Optional[UUID] = None,
    ) -> ClassificationOutcome:
        """Classify without acting on the result. Audited like a full flow."""
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            await self._audit_logger.log_utterance_received(utterance, correlation_id)

        outcome = await asyncio.to_thread(self._classifier.classify, utterance)

        if self._audit_logger:
            if outcome.fallback_reason:
                await self._audit_logger.log_model_fallback(
                    error_message=outcome.fallback_reason,
                    correlation_id=correlation_id,
                )

            record = outcome.record
            label = record.action.value if isinstance(record, QueryRecord) else record.type.value
            await self._audit_logger.log_utterance_classified(
                kind=record.kind,
                label=label,
                stage=outcome.stage.value,
                source=outcome.source,
                confidence=outcome.confidence,
                correlation_id=correlation_id,
            )

            if outcome.is_low_confidence(self._low_confidence_threshold):
                await self._audit_logger.log_low_confidence(
                    utterance=utterance,
                    stage=outcome.stage.value,
                    confidence=outcome.confidence,
                    correlation_id=correlation_id,
                )

        return outcome

    async def handle_utterance(
        self,
        utterance: str,
        today: Optional[dt.date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> FlowResponse:
        """
        Handle one utterance end to end.

        Args:
            utterance: What the user said (speech-to-text output or typed)
            today: Reference date for "today" and relative query ranges
            correlation_id: Ties all audit events of this utterance together

        Raises:
            StorageError: If the ledger storage fails while saving
        """
        correlation_id = correlation_id or create_correlation_id()
        outcome = await self.classify(utterance, correlation_id)

        if isinstance(outcome.record, QueryRecord):
            return await self._answer_query(outcome, today, correlation_id)
        return await self._record_transaction(outcome, today, correlation_id)

    async def _answer_query(
        self,
        outcome: ClassificationOutcome,
        today: Optional[dt.date],
        correlation_id: UUID,
    ) -> FlowResponse:
        query: QueryRecord = outcome.record
        result = await self._query_executor.execute(query, today=today)

        if self._audit_logger:
            await self._audit_logger.log_query_executed(
                query_id=result.query_id,
                action=query.action.value,
                result_count=result.result_count,
                correlation_id=correlation_id,
            )
            if not result.success:
                await self._audit_logger.log_error(
                    error_type="query_failed",
                    error_message=result.error_message or "unknown",
                    correlation_id=correlation_id,
                )

        return FlowResponse(
            correlation_id=correlation_id,
            reply=format_query_reply(result),
            outcome=outcome,
            query_result=result,
        )

    async def _record_transaction(
        self,
        outcome: ClassificationOutcome,
        today: Optional[dt.date],
        correlation_id: UUID,
    ) -> FlowResponse:
        record: TransactionRecord = outcome.record
        validation = self._validator.validate(record, today=today)

        if not validation.is_valid:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    issues=[issue.model_dump() for issue in validation.issues],
                    correlation_id=correlation_id,
                )
            reason = next(i.message for i in validation.issues if i.severity == "error")
            return FlowResponse(
                correlation_id=correlation_id,
                reply=f"Not recorded: {reason}. Please say it again.",
                outcome=outcome,
                validation=validation,
            )

        transaction = StoredTransaction.from_record(record, today=today)
        try:
            await self._storage.save_transaction(transaction)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="ledger_storage",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_saved(
                transaction_id=transaction.id,
                type_=transaction.type.value,
                amount=str(transaction.amount),
                correlation_id=correlation_id,
            )

        return FlowResponse(
            correlation_id=correlation_id,
            reply=format_transaction_reply(record),
            outcome=outcome,
            transaction=transaction,
            validation=validation,
            saved=True,
        )

    async def apply_update(
        self,
        transaction_id: UUID,
        command: str,
        correlation_id: Optional[UUID] = None,
    ) -> FlowResponse:
        """
        Apply a spoken update command to a stored transaction.

        Raises:
            NotFoundError: If no transaction has this id
        """
        correlation_id = correlation_id or create_correlation_id()

        transaction = await self._storage.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        parsed = await asyncio.to_thread(classify_update_command, command)

        if parsed.intent == UpdateIntent.DELETE:
            await self._storage.delete_transaction(transaction_id)
            if self._audit_logger:
                await self._audit_logger.log_transaction_deleted(transaction_id, correlation_id)
            return FlowResponse(
                correlation_id=correlation_id,
                reply="Transaction deleted.",
                transaction=transaction,
                command=parsed,
            )

        if parsed.intent == UpdateIntent.READ_ALOUD:
            return FlowResponse(
                correlation_id=correlation_id,
                reply=format_read_aloud(transaction),
                transaction=transaction,
                command=parsed,
            )

        return await self._modify(transaction, parsed, correlation_id)

    async def _modify(
        self,
        transaction: StoredTransaction,
        command: TransactionUpdateCommand,
        correlation_id: UUID,
    ) -> FlowResponse:
        if command.is_unclear:
            return FlowResponse(
                correlation_id=correlation_id,
                reply="Could not understand the changes.",
                transaction=transaction,
                command=command,
            )

        changes = {}
        if command.amount is not None:
            changes["amount"] = command.amount
        if command.notes is not None:
            changes["notes"] = command.notes

        updated = transaction.model_copy(update=changes)
        await self._storage.update_transaction(updated)

        if self._audit_logger:
            await self._audit_logger.log_transaction_updated(
                transaction_id=updated.id,
                changes={key: str(value) for key, value in changes.items()},
                correlation_id=correlation_id,
            )

        return FlowResponse(
            correlation_id=correlation_id,
            reply="Transaction updated.",
            transaction=updated,
            command=command,
            saved=True,
        )


def create_app_components(
    settings: Optional[Settings] = None,
    ledger_storage: Optional[LedgerStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    use_model: bool = True,
) -> LedgerFlow:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; loaded from the environment if omitted
        ledger_storage: Transaction storage; in-memory if omitted
        audit_storage: Audit storage; in-memory if omitted
        use_model: Set to False to use only the rule-based classifier

    Returns:
        A ready LedgerFlow
    """
    settings = settings or get_settings()
    ledger_storage = ledger_storage or InMemoryLedgerStorage()
    audit_logger = AuditLogger(audit_storage or InMemoryAuditStorage())

    if use_model:
        classifier = create_classifier(settings)
    else:
        classifier = RuleBasedClassifier(settings.classifier)

    return LedgerFlow(
        ledger_storage=ledger_storage,
        classifier=classifier,
        audit_logger=audit_logger,
        settings=settings,
    )
