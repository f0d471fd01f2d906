"""
Defensive JSON extraction from LLM replies.

Model output may wrap JSON in code fences, surround it with prose, or not
contain JSON at all. These helpers never raise on malformed input; they return
None and let callers apply their fallbacks.
"""

import json
import re
from typing import Any

import structlog

logger = structlog.get_logger()

# ```json ... ``` or ``` ... ```
FENCED_BLOCK_PATTERN = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

_OPENERS = {"[": "]", "{": "}"}


def extract_fenced_json(text: str | None) -> Any | None:
    """
    Parse the first fenced code block that holds valid JSON.

    Args:
        text: Raw model reply

    Returns:
        Parsed JSON value, or None when no fenced block parses

    Examples:
        >>> extract_fenced_json('Sure!\\n```json\\n{"a": 1}\\n```')
        {'a': 1}
        >>> extract_fenced_json("no json here") is None
        True
    """
    if not text:
        return None

    for match in FENCED_BLOCK_PATTERN.finditer(text):
        block = match.group(1).strip()
        try:
            return json.loads(block)
        except ValueError:  # includes JSONDecodeError and oversized int literals
            logger.debug("Fenced block is not valid JSON", block_preview=block[:80])
    return None


def extract_first_json_value(text: str | None) -> Any | None:
    """
    Parse the first bracket/brace-delimited JSON value in text.

    Scans for the first '[' or '{' and walks to its balanced closer, skipping
    brackets inside string literals. If that span does not parse, the next
    opener is tried.

    Args:
        text: Raw model reply

    Returns:
        Parsed JSON value, or None

    Examples:
        >>> extract_first_json_value('Here: [{"symbol": "AAPL"}] done')
        [{'symbol': 'AAPL'}]
    """
    if not text:
        return None

    start = 0
    while True:
        begin = _find_opener(text, start)
        if begin < 0:
            return None
        end = _find_balanced_end(text, begin)
        if end >= 0:
            try:
                return json.loads(text[begin : end + 1])
            except ValueError:  # includes JSONDecodeError and oversized int literals
                pass
        start = begin + 1


def extract_json(text: str | None) -> Any | None:
    """Fenced block first, then the first bare JSON value."""
    value = extract_fenced_json(text)
    if value is not None:
        return value
    return extract_first_json_value(text)


def _find_opener(text: str, start: int) -> int:
    positions = [p for p in (text.find("[", start), text.find("{", start)) if p >= 0]
    return min(positions) if positions else -1


def _find_balanced_end(text: str, begin: int) -> int:
    stack = [_OPENERS[text[begin]]]
    in_string = False
    escaped = False

    for index in range(begin + 1, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in ("]", "}"):
            if char != stack[-1]:
                return -1
            stack.pop()
            if not stack:
                return index
    return -1
