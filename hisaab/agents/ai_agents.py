"""
Model-backed Utterance Classifier

DESIGN DECISION: Gemini is an optional second opinion, never the only one.
It is always composed behind FallbackClassifier with the rule engine, so
a missing key, a network failure or a malformed answer degrades to the
deterministic cascade.

CRITICAL BOUNDARIES:
- The model ONLY translates an utterance into one of the two record schemas
- Its answer is validated with the same pydantic models the rule engine uses
- Anything that does not validate is a ModelClassificationError, never a record

The LLM is a TRANSLATOR, not an ORACLE.
"""

from typing import Any, Optional

import google.generativeai as genai
import structlog
from tenacity import Retrying, stop_after_attempt, wait_exponential

from hisaab.classifier.engine import (
    STAGE_CONFIDENCE,
    ModelClassificationError,
    UtteranceClassifier,
)
from hisaab.config import GeminiSettings, get_settings
from hisaab.models.records import (
    ClassificationOutcome,
    ClassificationStage,
    RecordParseError,
    parse_record,
)

logger = structlog.get_logger(__name__)


PROMPT_TEMPLATE = """You are a bookkeeping assistant for Indian shopkeepers. Convert Hinglish utterances to JSON.

SCHEMAS:

Transaction (money in/out):
{{"kind":"transaction","action":"add_transaction","direction":"in|out","type":"sale|purchase|loan_given|loan_taken|expense|other","party_name":"Name or null","amount":0,"date":"today","notes":"text"}}

Query (asking question):
{{"kind":"query","action":"query_total_sales|query_total_expenses|query_overall_summary|query_balance","party_name":"Name or null","time_range":"today|yesterday|this_week|this_month|all"}}

RULES:
- "in" = money coming to shopkeeper
- "out" = money going from shopkeeper
- "udhar" + "liye" = loan_taken (IN)
- "udhar" + "diya" = loan_given (OUT)
- "bikri/becha/sale" = sale (IN)
- "bill/bhar/payment" = expense (OUT)
- "kharcha/expense" = expense (OUT)
- Extract party name from "X se" (from) or "X ko" (to)
- A question (kitna, batao, balance, ?) is always a query
- Output ONLY valid JSON, nothing else

EXAMPLES:

Input: Ramesh se 500 liye udhar
Output: {{"kind":"transaction","action":"add_transaction","direction":"in","type":"loan_taken","party_name":"Ramesh","amount":500,"date":"today","notes":"Loan from Ramesh"}}

Input: Sunil ko 300 diya udhar
Output: {{"kind":"transaction","action":"add_transaction","direction":"out","type":"loan_given","party_name":"Sunil","amount":300,"date":"today","notes":"Loan to Sunil"}}

Input: Aaj 2000 ki bikri hui
Output: {{"kind":"transaction","action":"add_transaction","direction":"in","type":"sale","party_name":null,"amount":2000,"date":"today","notes":"Daily sales"}}

Input: Bijli ka bill 900 bhar diya
Output: {{"kind":"transaction","action":"add_transaction","direction":"out","type":"expense","party_name":null,"amount":900,"date":"today","notes":"Electricity bill"}}

Input: Aaj ki total bikri kitni hai?
Output: {{"kind":"query","action":"query_total_sales","party_name":null,"time_range":"today"}}

Input: Ramesh ka balance kitna hai?
Output: {{"kind":"query","action":"query_balance","party_name":"Ramesh","time_range":null}}

NOW PROCESS:

Input: {utterance}
Output:"""


def build_prompt(utterance: str) -> str:
    """Few-shot prompt for one utterance."""
    return PROMPT_TEMPLATE.format(utterance=utterance.strip())


def extract_json(raw: str) -> str:
    """
    Cut the JSON object out of a model answer.

    Models like to wrap their answer in prose or code fences; everything
    from the first "{" to the last "}" is kept.
    """
    start = raw.find("{")
    end = raw.rfind("}") + 1
    if start < 0 or end <= start:
        raise RecordParseError(f"No JSON object in model output: {raw[:200]!r}")
    return raw[start:end]


class GeminiUtteranceClassifier(UtteranceClassifier):
    """
    Classify utterances with Gemini.

    RESPONSIBILITIES:
    - Build the few-shot prompt
    - Call the model, retrying transient failures
    - Validate the answer against the record schemas

    BOUNDARIES:
    - NEVER returns an unvalidated record
    - Raises ModelClassificationError once every attempt has failed
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        wait: Optional[Any] = None,
    ):
        """
        Args:
            settings: Gemini settings; loaded from the environment if omitted
            model: Anything with generate_content(prompt) -> response.text.
                Injected in tests; built from settings otherwise.
            wait: tenacity wait strategy between attempts
        """
        self._settings = settings or get_settings().gemini
        self._wait = wait or wait_exponential(multiplier=1, min=2, max=10)
        self._model = model if model is not None else self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        if not self._settings.is_configured:
            raise ModelClassificationError("GEMINI_API_KEY is not set")

        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    def _generate(self, prompt: str) -> str:
        response = self._model.generate_content(prompt)
        text = getattr(response, "text", None)
        if not text:
            raise ModelClassificationError("Empty response from model")
        return text.strip()

    def classify(self, utterance: str) -> ClassificationOutcome:
        prompt = build_prompt(utterance or "")

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._settings.max_attempts),
                wait=self._wait,
                reraise=True,
            ):
                with attempt:
                    raw = self._generate(prompt)
                    record = parse_record(extract_json(raw))
        except ModelClassificationError:
            raise
        except RecordParseError as e:
            raise ModelClassificationError(f"Model returned an invalid record: {e}") from e
        except Exception as e:
            raise ModelClassificationError(f"Gemini request failed: {e}") from e

        logger.debug("model_classified", utterance=utterance, kind=record.kind)

        return ClassificationOutcome(
            record=record,
            confidence=STAGE_CONFIDENCE[ClassificationStage.MODEL],
            stage=ClassificationStage.MODEL,
            source="gemini",
            reasoning=f"{self._settings.model_name} few-shot",
        )
