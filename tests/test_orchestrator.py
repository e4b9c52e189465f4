"""
Integration tests for the ledger flows.

Each test runs one complete session on in-memory storage inside a
single event loop.
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from hisaab.audit import AuditLogger
from hisaab.classifier import (
    FallbackClassifier,
    ModelClassificationError,
    RuleBasedClassifier,
    UtteranceClassifier,
)
from hisaab.config import ClassifierSettings
from hisaab.models.audit import AuditEventType
from hisaab.orchestrator import LedgerFlow, create_app_components
from hisaab.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerStorage,
    NotFoundError,
    StorageError,
)

TODAY = date(2024, 6, 12)


class FailingClassifier(UtteranceClassifier):
    def classify(self, utterance):
        raise ModelClassificationError("model unavailable")


class BrokenLedgerStorage(InMemoryLedgerStorage):
    async def save_transaction(self, transaction):
        raise StorageError("disk full")


@pytest.fixture
def ledger():
    return InMemoryLedgerStorage()


@pytest.fixture
def audit():
    return InMemoryAuditStorage()


@pytest.fixture
def flow(ledger, audit):
    return create_app_components(ledger_storage=ledger, audit_storage=audit, use_model=False)


async def _event_types(audit, correlation_id):
    events = await audit.get_events_by_correlation_id(correlation_id)
    return [event.event_type for event in events]


class TestUtteranceFlow:
    """Tests for LedgerFlow.handle_utterance()."""

    def test_transaction_is_saved(self, flow, ledger, audit):
        async def session():
            response = await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            stored = await ledger.get_transaction(response.transaction.id)
            types = await _event_types(audit, response.correlation_id)
            return response, stored, types

        response, stored, types = asyncio.run(session())

        assert response.saved
        assert response.reply == "Sale recorded: ₹2000"
        assert stored.date == TODAY
        assert stored.amount == Decimal("2000")
        assert types == [
            AuditEventType.UTTERANCE_RECEIVED,
            AuditEventType.UTTERANCE_CLASSIFIED,
            AuditEventType.TRANSACTION_SAVED,
        ]

    def test_queries_answer_from_saved_records(self, flow):
        async def session():
            await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            await flow.handle_utterance("Bijli ka bill 900 bhar diya", today=TODAY)
            await flow.handle_utterance("Ramesh se 500 liye udhar", today=TODAY)
            return [
                await flow.handle_utterance(question, today=TODAY)
                for question in (
                    "Aaj ki total bikri kitni hai?",
                    "aaj ka kharcha kitna hai",
                    "munafa kitna hua",
                    "Ramesh ka balance kitna hai?",
                )
            ]

        sales, expenses, profit, balance = asyncio.run(session())

        assert sales.reply == "Today's sales: ₹2000"
        assert expenses.reply == "Today's expenses: ₹900"
        assert profit.reply == "Overall profit: ₹1600"
        assert balance.reply == "You owe Ramesh: ₹500"
        assert not sales.saved
        assert sales.query_result.result_count == 1

    def test_balance_without_party_asks_for_one(self, flow, audit):
        async def session():
            response = await flow.handle_utterance("aaj ka kitna hua?", today=TODAY)
            return response, await _event_types(audit, response.correlation_id)

        response, types = asyncio.run(session())

        assert response.outcome.record.action.value == "query_balance"
        assert not response.query_result.success
        assert response.reply == "Balance query needs a party name"
        assert AuditEventType.SYSTEM_ERROR in types

    def test_missing_amount_is_not_saved(self, flow, ledger, audit):
        async def session():
            response = await flow.handle_utterance("bijli ka bill bhara", today=TODAY)
            stored = await ledger.list_transactions()
            types = await _event_types(audit, response.correlation_id)
            return response, stored, types

        response, stored, types = asyncio.run(session())

        assert not response.saved
        assert response.needs_confirmation
        assert response.reply.startswith("Not recorded: No amount was recognized")
        assert stored == []
        assert AuditEventType.VALIDATION_FAILED in types

    def test_low_confidence_is_audited(self, flow, audit):
        async def session():
            response = await flow.handle_utterance("kuch 500 ka", today=TODAY)
            return response, await _event_types(audit, response.correlation_id)

        response, types = asyncio.run(session())

        assert response.saved
        assert AuditEventType.LOW_CONFIDENCE_CLASSIFICATION in types

    def test_model_failure_falls_back_to_rules(self, ledger, audit):
        rules = RuleBasedClassifier(ClassifierSettings())
        flow = LedgerFlow(
            ledger_storage=ledger,
            classifier=FallbackClassifier(FailingClassifier(), rules),
            audit_logger=AuditLogger(audit),
        )

        async def session():
            response = await flow.handle_utterance("Ramesh se 500 liye udhar", today=TODAY)
            return response, await _event_types(audit, response.correlation_id)

        response, types = asyncio.run(session())

        assert response.saved
        assert response.outcome.fallback_reason == "model unavailable"
        assert AuditEventType.MODEL_FALLBACK_USED in types

    def test_storage_failure_propagates(self, audit):
        flow = create_app_components(
            ledger_storage=BrokenLedgerStorage(),
            audit_storage=audit,
            use_model=False,
        )

        async def session():
            with pytest.raises(StorageError):
                await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            return await audit.get_recent_events()

        events = asyncio.run(session())

        assert events[0].event_type == AuditEventType.EXTERNAL_SERVICE_ERROR


class TestUpdateFlow:
    """Tests for LedgerFlow.apply_update()."""

    def test_modify_amount(self, flow):
        async def session():
            saved = await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            updated = await flow.apply_update(saved.transaction.id, "iska 2500 kar do")
            total = await flow.handle_utterance("aaj ki bikri kitni hai", today=TODAY)
            return updated, total

        updated, total = asyncio.run(session())

        assert updated.reply == "Transaction updated."
        assert updated.transaction.amount == Decimal("2500")
        assert updated.transaction.notes == "Aaj 2000 ki bikri hui"
        assert total.reply == "Today's sales: ₹2500"

    def test_modify_notes(self, flow):
        async def session():
            saved = await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            return await flow.apply_update(saved.transaction.id, "likho ki Ramesh ka maal")

        updated = asyncio.run(session())

        assert updated.transaction.notes == "Ramesh ka maal"
        assert updated.transaction.amount == Decimal("2000")

    def test_read_aloud(self, flow):
        async def session():
            saved = await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            return await flow.apply_update(saved.transaction.id, "sunao")

        response = asyncio.run(session())

        assert response.reply == "Transaction: ₹2000, notes: Aaj 2000 ki bikri hui"

    def test_delete(self, flow, ledger):
        async def session():
            saved = await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            response = await flow.apply_update(saved.transaction.id, "isko delete kar do")
            return response, await ledger.get_transaction(saved.transaction.id)

        response, stored = asyncio.run(session())

        assert response.reply == "Transaction deleted."
        assert stored is None

    def test_unclear_command_changes_nothing(self, flow, ledger):
        async def session():
            saved = await flow.handle_utterance("Aaj 2000 ki bikri hui", today=TODAY)
            response = await flow.apply_update(saved.transaction.id, "hmm")
            return response, await ledger.get_transaction(saved.transaction.id)

        response, stored = asyncio.run(session())

        assert response.reply == "Could not understand the changes."
        assert response.needs_confirmation
        assert stored.amount == Decimal("2000")

    def test_unknown_transaction(self, flow):
        with pytest.raises(NotFoundError):
            asyncio.run(flow.apply_update(uuid4(), "sunao"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
