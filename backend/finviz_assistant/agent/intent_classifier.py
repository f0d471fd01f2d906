"""
Intent classification for incoming chat utterances.

The model is asked for a fenced JSON decision. When the call fails or the
reply has no usable JSON, a keyword heuristic over the utterance takes over,
so classify() always returns a decision and never raises.
"""

import re
from typing import Any

import structlog

from ..core.utils.json_utils import extract_json
from ..core.utils.symbol_utils import extract_symbols
from ..models.session import FormatType
from .llm_client import TextGenerator
from .prompts import build_intent_prompt
from .state import IntentResult

logger = structlog.get_logger()

DATA_INTENT = "financial_data"
GENERAL_INTENT = "general_qa"

CREATE_COMPONENT_PATTERN = re.compile(r"\bcreate\s+a\s+component\b", re.IGNORECASE)

# Only a leading question phrase counts; "show me what is trending" is a data request
QUESTION_PATTERN = re.compile(
    r"^\W*(?:what\s+is|what's|what\s+are|explain|tell\s+me\s+about|define|how\s+to)\b",
    re.IGNORECASE,
)

DATA_REQUEST_PATTERN = re.compile(
    r"\b(?:show|display|visuali[sz]e|charts?|tables?|lists?|financials?|data|"
    r"stocks?|prices?|plot|graph)\b",
    re.IGNORECASE,
)

# Checked in this order; the first explicit keyword wins
FORMAT_PATTERNS: list[tuple[FormatType, re.Pattern[str]]] = [
    (FormatType.TABLE, re.compile(r"\btables?\b", re.IGNORECASE)),
    (FormatType.CHART, re.compile(r"\bcharts?\b", re.IGNORECASE)),
    (FormatType.LIST, re.compile(r"\blists?\b", re.IGNORECASE)),
]

SECTOR_PATTERN = re.compile(r"\b([A-Za-z][\w&-]*)\s+sector\b", re.IGNORECASE)
METRIC_PHRASE_PATTERN = re.compile(r"\b([A-Za-z/][\w/-]*)\s+metric\b", re.IGNORECASE)
SUBJECT_TAIL_PATTERN = re.compile(r"\b(?:for|of|about|on)\s+(.+)$", re.IGNORECASE)
TRAILING_FORMAT_PATTERN = re.compile(
    r"\s+(?:in|as)\s+(?:an?\s+)?(?:table|chart|list)s?\b.*$", re.IGNORECASE
)

KNOWN_METRICS: tuple[str, ...] = (
    "market capitalization",
    "market cap",
    "p/e ratio",
    "dividend yield",
    "volume",
    "revenue",
    "earnings",
)

_DETERMINERS = frozenset({"the", "a", "an", "this", "that", "each", "every", "my"})

# Uppercase words in requests that are not tickers
_NON_SYMBOL_WORDS = frozenset(
    {"SHOW", "DATA", "TABLE", "CHART", "LIST", "STOCK", "PRICE", "PLEASE", "GIVE"}
)


class IntentClassifier:
    """
    Turns the latest user utterance into an IntentResult.

    Args:
        llm: Text generator used for the model decision
        none_case_sensitive: Whether only the exact literal "none" counts as absent
    """

    def __init__(self, llm: TextGenerator, none_case_sensitive: bool = True):
        self.llm = llm
        self.none_case_sensitive = none_case_sensitive

    async def classify(self, utterance: str | None) -> IntentResult:
        """
        Classify an utterance as a data request or a general question.

        Args:
            utterance: Latest user message (may be empty)

        Returns:
            IntentResult from the model, or from the keyword heuristic
        """
        text = (utterance or "").strip()
        if not text:
            logger.info("Empty utterance, classifying by keywords")
            return classify_by_keywords(text)

        try:
            reply = await self.llm.generate(build_intent_prompt(text))
        except Exception as e:
            logger.warning(
                "Intent model call failed, falling back to keywords",
                error=str(e),
                error_type=type(e).__name__,
            )
            return classify_by_keywords(text)

        logger.debug("Intent model raw reply", reply=reply)
        payload = extract_json(reply)
        if not isinstance(payload, dict):
            logger.warning(
                "Intent reply had no JSON object, falling back to keywords",
                reply_preview=reply[:120],
            )
            return classify_by_keywords(text)

        result = self._from_payload(payload)
        logger.info(
            "Intent classified",
            source=result.source,
            is_data_request=result.is_data_request,
            format=result.format.value if result.format else None,
            data_subject=result.data_subject,
        )
        return result

    def _from_payload(self, payload: dict[str, Any]) -> IntentResult:
        intent_type = payload.get("intent_type")
        if intent_type not in (DATA_INTENT, GENERAL_INTENT):
            logger.warning(
                "Unrecognized intent_type, defaulting to general question",
                intent_type=intent_type,
            )

        raw_format = payload.get("data_format")
        data_format = FormatType.parse(raw_format)
        if raw_format not in (None, "none") and data_format is None:
            logger.warning("Unrecognized data_format, treating as absent", value=raw_format)

        return IntentResult(
            is_data_request=intent_type == DATA_INTENT,
            format=data_format,
            data_subject=self._clean_subject(payload.get("data_query")),
            source="model",
        )

    def _clean_subject(self, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        subject = value.strip()
        if not subject:
            return None
        literal = subject if self.none_case_sensitive else subject.lower()
        if literal == "none":
            return None
        return subject


def classify_by_keywords(utterance: str | None) -> IntentResult:
    """
    Deterministic keyword classification. Total: always returns a decision.

    Examples:
        >>> classify_by_keywords("show me a chart for AAPL")
        IntentResult(is_data_request=True, format=<FormatType.CHART: 'chart'>, data_subject='AAPL', source='heuristic')
        >>> classify_by_keywords("what is market capitalization?").is_data_request
        False
    """
    text = (utterance or "").strip()

    if not text:
        return IntentResult(is_data_request=False, source="heuristic")

    if CREATE_COMPONENT_PATTERN.search(text):
        return IntentResult(is_data_request=True, source="heuristic")

    if QUESTION_PATTERN.search(text):
        return IntentResult(is_data_request=False, source="heuristic")

    symbols = _ticker_symbols(text)
    if not DATA_REQUEST_PATTERN.search(text) and not symbols:
        return IntentResult(is_data_request=False, source="heuristic")

    return IntentResult(
        is_data_request=True,
        format=format_from_text(text),
        data_subject=subject_from_text(text),
        source="heuristic",
    )


def format_from_text(text: str | None) -> FormatType | None:
    """Explicitly named format in text, if any. Never guesses."""
    if not text:
        return None
    for data_format, pattern in FORMAT_PATTERNS:
        if pattern.search(text):
            return data_format
    return None


def subject_from_text(text: str) -> str | None:
    """
    Best-effort data subject: sector phrase, metric phrase, tickers,
    a "for/of <phrase>" tail, then well-known metric names.
    """
    sector = SECTOR_PATTERN.search(text)
    if sector and sector.group(1).lower() not in _DETERMINERS:
        return f"{sector.group(1)} sector"

    metric = METRIC_PHRASE_PATTERN.search(text)
    if metric and metric.group(1).lower() not in _DETERMINERS:
        return f"{metric.group(1)} metric"

    symbols = _ticker_symbols(text)
    if symbols:
        return ", ".join(symbols)

    tail = SUBJECT_TAIL_PATTERN.search(text)
    if tail:
        phrase = TRAILING_FORMAT_PATTERN.sub("", tail.group(1))
        phrase = phrase.strip(" \t?!.,;:")
        words = phrase.split()
        while words and words[0].lower() in _DETERMINERS:
            words.pop(0)
        if words and format_from_text(" ".join(words)) is None:
            return " ".join(words)

    lowered = text.lower()
    for metric_name in KNOWN_METRICS:
        if metric_name in lowered:
            return metric_name

    return None


def _ticker_symbols(text: str) -> list[str]:
    return [s for s in extract_symbols(text) if s not in _NON_SYMBOL_WORDS]
