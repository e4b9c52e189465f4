"""Utterance classification engine."""

from hisaab.classifier.engine import (
    ClassifierError,
    FallbackClassifier,
    ModelClassificationError,
    RuleBasedClassifier,
    UtteranceClassifier,
    create_classifier,
)
from hisaab.classifier.entities import extract_party_name
from hisaab.classifier.normalizer import normalize
from hisaab.classifier.numerals import extract_amount
from hisaab.classifier.queries import classify_query, extract_time_range
from hisaab.classifier.router import is_query
from hisaab.classifier.transactions import classify_transaction
from hisaab.classifier.updates import classify_update_command

__all__ = [
    "ClassifierError",
    "FallbackClassifier",
    "ModelClassificationError",
    "RuleBasedClassifier",
    "UtteranceClassifier",
    "classify_query",
    "classify_transaction",
    "classify_update_command",
    "create_classifier",
    "extract_amount",
    "extract_party_name",
    "extract_time_range",
    "is_query",
    "normalize",
]
