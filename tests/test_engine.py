"""
Tests for the classifier engine and the Gemini backend.

No real API calls: the Gemini classifier is handed a fake model object.
"""

import json
from decimal import Decimal
from types import SimpleNamespace

import pytest
from tenacity import wait_none

from hisaab.agents.ai_agents import GeminiUtteranceClassifier, build_prompt, extract_json
from hisaab.classifier import (
    ClassifierError,
    FallbackClassifier,
    ModelClassificationError,
    RuleBasedClassifier,
    UtteranceClassifier,
    create_classifier,
)
from hisaab.config import ClassifierSettings, GeminiSettings, Settings
from hisaab.models.records import (
    ClassificationStage,
    QueryRecord,
    RecordParseError,
    TransactionRecord,
)


class FakeModel:
    """Returns (or raises) the queued answers in order."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def generate_content(self, prompt):
        self.prompts.append(prompt)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return SimpleNamespace(text=answer)


class FailingClassifier(UtteranceClassifier):
    def classify(self, utterance):
        raise ModelClassificationError("quota exceeded")


@pytest.fixture
def rules():
    return RuleBasedClassifier(ClassifierSettings())


def _gemini(*answers, max_attempts=2):
    model = FakeModel(*answers)
    classifier = GeminiUtteranceClassifier(
        GeminiSettings(api_key="test", max_attempts=max_attempts),
        model=model,
        wait=wait_none(),
    )
    return classifier, model


class TestRuleBasedScenarios:
    """End-to-end classification of representative utterances."""

    def test_loan_taken(self, rules):
        outcome = rules.classify("Ramesh se 500 liye udhar")
        assert json.loads(outcome.to_json()) == {
            "kind": "transaction",
            "action": "add_transaction",
            "direction": "in",
            "type": "loan_taken",
            "party_name": "Ramesh",
            "amount": 500,
            "date": "today",
            "notes": "Loan from Ramesh",
        }
        assert outcome.stage == ClassificationStage.LOAN_PHRASE
        assert outcome.source == "rules"

    def test_daily_sale(self, rules):
        outcome = rules.classify("Aaj 2000 ki bikri hui")
        record = outcome.record
        assert record.type.value == "sale"
        assert record.direction.value == "in"
        assert record.party_name is None
        assert record.amount == Decimal("2000")
        assert record.notes == "Aaj 2000 ki bikri hui"

    def test_electricity_bill(self, rules):
        record = rules.classify("Bijli ka bill 900 bhar diya").record
        assert record.type.value == "expense"
        assert record.direction.value == "out"
        assert record.party_name is None
        assert record.amount == Decimal("900")
        assert record.notes == "Expense: Electricity bill"

    def test_total_sales_query(self, rules):
        outcome = rules.classify("Aaj ki total bikri kitni hai?")
        assert json.loads(outcome.to_json()) == {
            "kind": "query",
            "action": "query_total_sales",
            "party_name": None,
            "time_range": "today",
        }
        assert outcome.is_query

    def test_balance_query(self, rules):
        outcome = rules.classify("Ramesh ka balance kitna hai?")
        assert json.loads(outcome.to_json()) == {
            "kind": "query",
            "action": "query_balance",
            "party_name": "Ramesh",
            "time_range": None,
        }

    def test_loan_given_with_party(self, rules):
        record = rules.classify("Sunil ko 300 udhar diya").record
        assert record.type.value == "loan_given"
        assert record.party_name == "Sunil"
        assert record.notes == "Loan to Sunil"

    def test_fallback_is_low_confidence(self, rules):
        outcome = rules.classify("kuch 500 ka")
        assert outcome.stage == ClassificationStage.FALLBACK
        assert outcome.confidence == pytest.approx(0.2)
        assert outcome.is_low_confidence(0.5)

    @pytest.mark.parametrize("text", ["", "   ", "???", "🙂", "x" * 5000])
    def test_never_raises(self, rules, text):
        """Test that any input yields exactly one valid record."""
        outcome = rules.classify(text)
        assert isinstance(outcome.record, (TransactionRecord, QueryRecord))

    @pytest.mark.parametrize("text", [
        "a" * 101 + " ko 500 diya",
        "b" * 101 + " ka balance kitna hai?",
    ])
    def test_overlong_party_word_is_not_a_party(self, rules, text):
        """Test that a letter run too long for party_name is ignored, not raised on."""
        outcome = rules.classify(text)
        assert outcome.record.party_name is None

    def test_party_at_length_limit_is_kept(self, rules):
        outcome = rules.classify("c" * 100 + " ko 500 diya")
        assert outcome.record.party_name == "C" + "c" * 99

    def test_empty_input_is_zero_amount_expense(self, rules):
        record = rules.classify("").record
        assert record.amount == Decimal("0")
        assert record.type.value == "expense"

    def test_deterministic(self, rules):
        text = "kharcha nikal ke aaj ki bikri 3000 hui"
        assert rules.classify(text) == rules.classify(text)


class TestGeminiClassifier:
    """Tests for GeminiUtteranceClassifier with a fake model."""

    VALID = (
        '{"kind":"transaction","action":"add_transaction","direction":"in",'
        '"type":"loan_taken","party_name":"Ramesh","amount":500,"date":"today",'
        '"notes":"Loan from Ramesh"}'
    )

    def test_parses_fenced_answer(self):
        classifier, model = _gemini(f"```json\n{self.VALID}\n```")
        outcome = classifier.classify("Ramesh se 500 liye udhar")
        assert outcome.stage == ClassificationStage.MODEL
        assert outcome.source == "gemini"
        assert outcome.record.party_name == "Ramesh"
        assert "Ramesh se 500 liye udhar" in model.prompts[0]

    def test_retries_transient_failure(self):
        classifier, model = _gemini(RuntimeError("timeout"), self.VALID)
        outcome = classifier.classify("Ramesh se 500 liye udhar")
        assert outcome.record.amount == Decimal("500")
        assert len(model.prompts) == 2

    def test_invalid_answer_raises_after_retries(self):
        classifier, model = _gemini("no idea", "still no idea")
        with pytest.raises(ModelClassificationError):
            classifier.classify("hmm")
        assert len(model.prompts) == 2

    def test_schema_violation_raises(self):
        classifier, _ = _gemini('{"kind":"transaction","type":"gift"}', max_attempts=1)
        with pytest.raises(ModelClassificationError):
            classifier.classify("hmm")

    def test_empty_answer_raises(self):
        classifier, _ = _gemini("", max_attempts=1)
        with pytest.raises(ClassifierError):
            classifier.classify("hmm")

    def test_missing_key_raises(self):
        with pytest.raises(ModelClassificationError):
            GeminiUtteranceClassifier(GeminiSettings(api_key=None))


class TestPromptHelpers:
    """Tests for build_prompt() and extract_json()."""

    def test_prompt_ends_with_utterance(self):
        prompt = build_prompt("  Aaj 2000 ki bikri hui ")
        assert prompt.rstrip().endswith("Input: Aaj 2000 ki bikri hui\nOutput:")

    def test_extract_json_strips_prose(self):
        assert extract_json('Sure! {"a": 1} hope this helps') == '{"a": 1}'

    def test_extract_json_without_object(self):
        with pytest.raises(RecordParseError):
            extract_json("nothing here")


class TestComposition:
    """Tests for FallbackClassifier and create_classifier()."""

    def test_fallback_on_model_failure(self, rules):
        classifier = FallbackClassifier(FailingClassifier(), rules)
        outcome = classifier.classify("Ramesh se 500 liye udhar")
        assert outcome.source == "rules"
        assert outcome.fallback_reason == "quota exceeded"
        assert outcome.record.amount == Decimal("500")

    def test_primary_used_when_it_succeeds(self, rules):
        gemini, _ = _gemini(TestGeminiClassifier.VALID)
        outcome = FallbackClassifier(gemini, rules).classify("kuch bhi")
        assert outcome.source == "gemini"
        assert outcome.fallback_reason is None

    def test_rules_only_without_key(self):
        assert isinstance(create_classifier(Settings()), RuleBasedClassifier)

    def test_model_composed_with_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test")
        assert isinstance(create_classifier(Settings()), FallbackClassifier)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
