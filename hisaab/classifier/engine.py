"""
Utterance Classification Engine

Turns one spoken or typed utterance into exactly one record:
a TransactionRecord (something happened to money) or a QueryRecord
(a question about what happened).

FLOW:
1. normalize      -> canonical lowercase text
2. route          -> query or transaction?
3a. query         -> action + party + time range
3b. transaction   -> party, amount, (type, direction), notes
4. wrap           -> ClassificationOutcome with confidence and stage

DESIGN DECISION: Classifiers are plain objects composed by the caller.
There is no global instance. The model-backed classifier is wrapped in
FallbackClassifier with the rule engine behind it, so a model failure
degrades to rules instead of to an error.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from hisaab.classifier.builder import build_transaction_record
from hisaab.classifier.entities import extract_party_name
from hisaab.classifier.normalizer import normalize
from hisaab.classifier.numerals import extract_amount
from hisaab.classifier.queries import classify_query
from hisaab.classifier.router import query_signal
from hisaab.classifier.transactions import classify_transaction
from hisaab.config import ClassifierSettings, Settings, get_settings
from hisaab.models.records import ClassificationOutcome, ClassificationStage

logger = structlog.get_logger(__name__)

# How much each stage is trusted. Phrase matches are near-certain; the
# fallback is a guess.
STAGE_CONFIDENCE: dict[ClassificationStage, float] = {
    ClassificationStage.QUERY: 0.9,
    ClassificationStage.QUERY_DEFAULT: 0.6,
    ClassificationStage.LOAN_PHRASE: 0.95,
    ClassificationStage.LOAN_VERB: 0.85,
    ClassificationStage.LOAN_PREPOSITION: 0.7,
    ClassificationStage.LOAN_DEFAULT: 0.5,
    ClassificationStage.EXPENSE_KEYWORD: 0.9,
    ClassificationStage.SALE_BY_PROXIMITY: 0.75,
    ClassificationStage.SALE_KEYWORD: 0.9,
    ClassificationStage.CREDIT_VERB: 0.75,
    ClassificationStage.DEBIT_VERB: 0.75,
    ClassificationStage.GIVING_VERB: 0.6,
    ClassificationStage.TAKING_VERB: 0.6,
    ClassificationStage.PARTY_PREPOSITION: 0.55,
    ClassificationStage.COMPLETION_MARKER: 0.5,
    ClassificationStage.FALLBACK: 0.2,
    ClassificationStage.MODEL: 0.8,
}


class ClassifierError(Exception):
    """Base exception for classifier backends."""
    pass


class ModelClassificationError(ClassifierError):
    """The model backend could not produce a valid record."""
    pass


class UtteranceClassifier(ABC):
    """
    Abstract interface for utterance classifiers.

    Implementations must return exactly one record per utterance.
    """

    @abstractmethod
    def classify(self, utterance: str) -> ClassificationOutcome:
        """Classify one utterance."""
        pass


class RuleBasedClassifier(UtteranceClassifier):
    """
    Deterministic keyword-cascade classifier.

    Holds only read-only settings, so one instance can be shared across
    threads. Never raises for any string input.
    """

    def __init__(self, settings: Optional[ClassifierSettings] = None):
        self._settings = settings or get_settings().classifier

    def classify(self, utterance: str) -> ClassificationOutcome:
        utterance = utterance or ""
        text = normalize(utterance)

        signal = query_signal(text)
        if signal is not None:
            record, stage = classify_query(text, utterance)
            reasoning = f"query signal '{signal}' -> {record.action.value}"
        else:
            party_name = extract_party_name(text)
            amount = extract_amount(text)
            classification, stage = classify_transaction(
                text,
                party_name,
                proximity_window=self._settings.proximity_window,
            )
            record = build_transaction_record(classification, amount, party_name, utterance)
            reasoning = f"{stage.value} -> {classification.type.value}/{classification.direction.value}"

        outcome = ClassificationOutcome(
            record=record,
            confidence=STAGE_CONFIDENCE[stage],
            stage=stage,
            source="rules",
            reasoning=reasoning,
        )

        if outcome.is_low_confidence(self._settings.low_confidence_threshold):
            logger.warning(
                "classification_low_confidence",
                utterance=utterance,
                stage=stage.value,
                confidence=outcome.confidence,
            )
        else:
            logger.debug("utterance_classified", stage=stage.value, reasoning=reasoning)

        return outcome


class FallbackClassifier(UtteranceClassifier):
    """
    Try the primary classifier; on any ClassifierError use the fallback.

    The fallback is expected to be the rule engine, which never fails.
    """

    def __init__(self, primary: UtteranceClassifier, fallback: UtteranceClassifier):
        self._primary = primary
        self._fallback = fallback

    def classify(self, utterance: str) -> ClassificationOutcome:
        try:
            return self._primary.classify(utterance)
        except ClassifierError as e:
            logger.warning(
                "model_classification_failed",
                error=str(e),
                utterance=utterance,
            )
            outcome = self._fallback.classify(utterance)
            return outcome.model_copy(update={"fallback_reason": str(e)})


def create_classifier(settings: Optional[Settings] = None) -> UtteranceClassifier:
    """
    Compose the classifier for this deployment.

    Gemini with the rule engine behind it when an API key is configured,
    the rule engine alone otherwise.
    """
    settings = settings or get_settings()
    rules = RuleBasedClassifier(settings.classifier)

    gemini = settings.gemini
    if not gemini.is_configured:
        return rules

    # Imported here so the rule engine never needs the Gemini SDK loaded
    from hisaab.agents.ai_agents import GeminiUtteranceClassifier

    return FallbackClassifier(GeminiUtteranceClassifier(gemini), rules)
