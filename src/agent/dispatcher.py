"""
agent.dispatcher - Deterministic intent classification.

Decides, without calling any model, which single local capability a raw
message most likely wants and pulls its arguments out with regexes.

Rules are evaluated in table order and the first match wins. The order is
the tie-break between lexically overlapping intents ("find the file ..."
is also a web search), so new rules must be inserted deliberately:

    1. file_search     file/document + search verb, no web/internet
    2. web_search      any search verb
    3. code            fenced block or code keywords
    4. calculation     "calculate"/"math" or <number><op><number>
    5. weather         "weather"/"temperature"
    -  fallback        nothing matched, free-form chat

A rule that matches but cannot extract usable arguments yields a decision
carrying a user-facing clarification instead of a tool call.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from domain.exceptions import ExtractionError
from domain.models import ToolCall

logger = logging.getLogger(__name__)

FALLBACK_INTENT = "fallback"

_SEARCH_VERBS = ("search", "find", "look for")
_WEB_SEARCH_VERBS = ("search", "find", "look up", "web search", "internet search")
_CODE_KEYWORDS = ("code", "execute", "run code", "python", "javascript")

_FILE_QUERY_RE = re.compile(
    r"(?:search|find|look for)\s+(?:in\s+)?(?:files?|documents?)\s+(?:for\s+)?(.+)",
    re.IGNORECASE | re.DOTALL,
)
_WEB_QUERY_RE = re.compile(
    r"(?:web search|internet search|search|find|look up)\s+(?:for\s+)?(.+)",
    re.IGNORECASE | re.DOTALL,
)
_FENCED_CODE_RE = re.compile(r"```[^\n`]*\n(.*?)```", re.DOTALL)
_INLINE_FENCE_RE = re.compile(r"```(.*?)```", re.DOTALL)
_ARITHMETIC_RE = re.compile(r"\d+(?:\.\d+)?(?:\s*[+\-*/]\s*\d+(?:\.\d+)?)+")
_CALCULATE_RE = re.compile(r"calculate\s+\d", re.IGNORECASE)
_LOCATION_RE = re.compile(r"(?:weather|temperature)\s+(?:in\s+|for\s+|at\s+)?([^.?!\n]+)", re.IGNORECASE)


def _cue(*words: str) -> re.Pattern[str]:
    """Whole-word matcher, so "Findlay" is not "find" and "Mathura" is not "math"."""
    return re.compile(r"\b(?:%s)\b" % "|".join(re.escape(w) for w in words))


_SEARCH_CUE = _cue(*_SEARCH_VERBS)
_WEB_SEARCH_CUE = _cue(*_WEB_SEARCH_VERBS)
_CODE_CUE = _cue(*_CODE_KEYWORDS)
_FILE_CUE = _cue("file", "files", "document", "documents")
_WEB_CUE = _cue("web", "internet")
_CALCULATION_CUE = _cue("calculate", "math")
_WEATHER_CUE = _cue("weather", "temperature")


# ---------------------------------------------------------------------------
# Matchers (receive the lower-cased message)
# ---------------------------------------------------------------------------

def _wants_file_search(text: str) -> bool:
    return (
        bool(_FILE_CUE.search(text))
        and bool(_SEARCH_CUE.search(text))
        and not _WEB_CUE.search(text)
    )


def _wants_web_search(text: str) -> bool:
    return bool(_WEB_SEARCH_CUE.search(text))


def _wants_code(text: str) -> bool:
    return "```" in text or bool(_CODE_CUE.search(text))


def _wants_calculation(text: str) -> bool:
    return (
        bool(_CALCULATION_CUE.search(text))
        or bool(_ARITHMETIC_RE.search(text))
        or bool(_CALCULATE_RE.search(text))
    )


def _wants_weather(text: str) -> bool:
    return bool(_WEATHER_CUE.search(text))


# ---------------------------------------------------------------------------
# Extractors (receive the original message, raise ExtractionError)
# ---------------------------------------------------------------------------

def _extract_file_query(message: str) -> dict[str, Any]:
    match = _FILE_QUERY_RE.search(message)
    query = match.group(1).strip() if match else ""
    if not query:
        raise ExtractionError(
            "I couldn't understand what you want me to search for in files. "
            "Please provide a search query."
        )
    return {"query": query}


def _extract_web_query(message: str) -> dict[str, Any]:
    match = _WEB_QUERY_RE.search(message)
    query = match.group(1).strip() if match else ""
    if not query:
        raise ExtractionError(
            "I couldn't understand what you want me to search for. "
            "Please provide a search query."
        )
    return {"query": query}


def _extract_code(message: str) -> dict[str, Any]:
    match = _FENCED_CODE_RE.search(message) or _INLINE_FENCE_RE.search(message)
    code = match.group(1).strip() if match else ""
    if not code:
        raise ExtractionError(
            "I found code-related keywords but couldn't extract the code. "
            "Please provide the code in a code block (```)."
        )
    return {"code": code}


def _extract_expression(message: str) -> dict[str, Any]:
    match = _ARITHMETIC_RE.search(message)
    if not match:
        raise ExtractionError(
            "I couldn't find a valid calculation expression in your message."
        )
    return {"expression": match.group(0)}


def _extract_location(message: str) -> dict[str, Any]:
    match = _LOCATION_RE.search(message)
    location = match.group(1).strip() if match else ""
    if not location:
        raise ExtractionError(
            "I couldn't tell which location you want the weather for. "
            'Please name a place, e.g. "weather in Paris".'
        )
    return {"location": location}


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IntentRule:
    """One row of the dispatch table: guard, target capability, extractor."""
    intent: str
    tool_name: str
    matches: Callable[[str], bool]
    extract: Callable[[str], dict[str, Any]]


DISPATCH_RULES: tuple[IntentRule, ...] = (
    IntentRule("file_search", "file_search", _wants_file_search, _extract_file_query),
    IntentRule("web_search", "web_search", _wants_web_search, _extract_web_query),
    IntentRule("code", "code_interpreter", _wants_code, _extract_code),
    IntentRule("calculation", "calculate", _wants_calculation, _extract_expression),
    IntentRule("weather", "get_weather", _wants_weather, _extract_location),
)


@dataclass(frozen=True)
class DispatchDecision:
    """Outcome of classifying one message.

    Exactly one of these holds:
        - tool_name and arguments are set (run that capability)
        - error is set (intent recognised, arguments missing)
        - intent is FALLBACK_INTENT (hand the message to free-form chat)
    """
    intent: str
    tool_name: Optional[str] = None
    arguments: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.intent == FALLBACK_INTENT

    def to_tool_call(self) -> ToolCall:
        if self.tool_name is None:
            raise ValueError(f"Decision for intent '{self.intent}' has no tool call")
        return ToolCall(name=self.tool_name, arguments=dict(self.arguments))


class IntentDispatcher:
    """Walks the rule table and returns the first matching decision."""

    def __init__(self, rules: tuple[IntentRule, ...] = DISPATCH_RULES):
        self._rules = rules

    @property
    def rules(self) -> tuple[IntentRule, ...]:
        return self._rules

    def classify(self, message: str) -> DispatchDecision:
        text = message.lower()
        for rule in self._rules:
            if not rule.matches(text):
                continue
            try:
                arguments = rule.extract(message)
            except ExtractionError as e:
                logger.info("Intent '%s' matched but extraction failed", rule.intent)
                return DispatchDecision(intent=rule.intent, error=str(e))
            logger.debug("Intent '%s' -> %s(%s)", rule.intent, rule.tool_name, arguments)
            return DispatchDecision(
                intent=rule.intent, tool_name=rule.tool_name, arguments=arguments,
            )
        return DispatchDecision(intent=FALLBACK_INTENT)
