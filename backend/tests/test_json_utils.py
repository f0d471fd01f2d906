"""
Unit tests for JSON extraction from model replies.
"""

from finviz_assistant.core.utils.json_utils import (
    extract_fenced_json,
    extract_first_json_value,
    extract_json,
)


class TestExtractFencedJson:
    """Test fenced code block parsing"""

    def test_json_fence(self):
        reply = 'Sure!\n```json\n{"intent_type": "general_qa"}\n```\nAnything else?'

        assert extract_fenced_json(reply) == {"intent_type": "general_qa"}

    def test_plain_fence(self):
        assert extract_fenced_json("```\n[1, 2]\n```") == [1, 2]

    def test_skips_invalid_block_and_uses_next(self):
        reply = "```json\n{not json}\n```\n```json\n{\"a\": 1}\n```"

        assert extract_fenced_json(reply) == {"a": 1}

    def test_no_fence_returns_none(self):
        assert extract_fenced_json('{"a": 1}') is None
        assert extract_fenced_json("") is None
        assert extract_fenced_json(None) is None

    def test_oversized_integer_in_fence_returns_none(self):
        reply = "```json\n[" + "1" * 5000 + "]\n```"

        assert extract_fenced_json(reply) is None


class TestExtractFirstJsonValue:
    """Test bracket-balanced scanning"""

    def test_array_surrounded_by_prose(self):
        reply = 'Here you go: [{"symbol": "AAPL", "price": 1.5, "volume": 3}] Enjoy.'

        assert extract_first_json_value(reply) == [
            {"symbol": "AAPL", "price": 1.5, "volume": 3}
        ]

    def test_brackets_inside_strings_are_ignored(self):
        reply = '{"note": "range [a, b} here", "n": 2}'

        assert extract_first_json_value(reply) == {"note": "range [a, b} here", "n": 2}

    def test_retries_after_unparseable_span(self):
        reply = "[see below] then [1, 2, 3]"

        assert extract_first_json_value(reply) == [1, 2, 3]

    def test_unbalanced_returns_none(self):
        assert extract_first_json_value('[{"symbol": "AAPL"') is None

    def test_no_json_returns_none(self):
        assert extract_first_json_value("I cannot help with that.") is None

    def test_oversized_integer_returns_none(self):
        reply = '{"n": ' + "9" * 5000 + "}"

        assert extract_first_json_value(reply) is None


class TestExtractJson:
    """Fenced block first, bare value as fallback"""

    def test_prefers_fenced_block(self):
        reply = '{"a": 0}\n```json\n{"a": 1}\n```'

        assert extract_json(reply) == {"a": 1}

    def test_bare_object_fallback(self):
        assert extract_json('intent: {"intent_type": "financial_data"}') == {
            "intent_type": "financial_data"
        }
