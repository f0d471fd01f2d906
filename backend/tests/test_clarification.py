"""
Unit tests for ClarificationResolver.

Tests the four-state decision and the per-slot merge precedence:
explicit selection > classifier value > free-text answer > pending value.
"""

import pytest

from finviz_assistant.agent.clarification import ClarificationResolver
from finviz_assistant.agent.state import (
    IntentResult,
    ResolverState,
    Route,
    TurnInput,
)
from finviz_assistant.models.session import FormatType, Session

# ===== Fixtures =====


@pytest.fixture
def resolver():
    return ClarificationResolver()


@pytest.fixture
def empty_session():
    return Session(session_id="s-1")


def data_intent(data_format=None, subject=None):
    return IntentResult(is_data_request=True, format=data_format, data_subject=subject)


GENERAL = IntentResult(is_data_request=False)


# ===== State Table =====


class TestStateTable:
    """Format/subject presence decides the state"""

    def test_both_known_is_ready(self, resolver, empty_session):
        decision = resolver.resolve(
            data_intent(FormatType.CHART, "AAPL"),
            TurnInput(utterance="show me a chart for AAPL"),
            empty_session,
        )

        assert decision.state == ResolverState.READY
        assert decision.route == Route.FETCH
        assert decision.resolved_format == FormatType.CHART
        assert decision.resolved_data_subject == "AAPL"

    def test_only_subject_needs_format(self, resolver, empty_session):
        decision = resolver.resolve(
            data_intent(subject="AAPL"), TurnInput(utterance="show AAPL"), empty_session
        )

        assert decision.state == ResolverState.NEED_FORMAT
        assert decision.route == Route.ASK_FORMAT
        assert decision.resolved_data_subject == "AAPL"

    def test_only_format_needs_subject(self, resolver, empty_session):
        decision = resolver.resolve(
            data_intent(FormatType.TABLE), TurnInput(utterance="a table"), empty_session
        )

        assert decision.state == ResolverState.NEED_DATA_SUBJECT
        assert decision.route == Route.ASK_DATA_SUBJECT
        assert decision.resolved_format == FormatType.TABLE

    def test_neither_asks_format_first(self, resolver, empty_session):
        decision = resolver.resolve(
            data_intent(), TurnInput(utterance="display financials"), empty_session
        )

        assert decision.state == ResolverState.NEED_FORMAT
        assert decision.resolved_format is None
        assert decision.resolved_data_subject is None

    def test_general_question(self, resolver, empty_session):
        decision = resolver.resolve(
            GENERAL, TurnInput(utterance="what is market capitalization?"), empty_session
        )

        assert decision.state == ResolverState.ANSWER_GENERAL
        assert decision.route == Route.ANSWER_GENERAL

    def test_general_question_ignores_pending(self, resolver):
        session = Session(
            session_id="s-1",
            pending_format=FormatType.TABLE,
            pending_data_subject="AAPL",
        )

        decision = resolver.resolve(GENERAL, TurnInput(utterance="hello"), session)

        assert decision.state == ResolverState.ANSWER_GENERAL


# ===== Merge Precedence =====


class TestMerge:
    """Pending values survive turns that carry no new signal"""

    def test_format_selection_completes_pending_subject(self, resolver):
        session = Session(session_id="s-1", pending_data_subject="AAPL", awaiting="format")

        decision = resolver.resolve(
            IntentResult(is_data_request=True, source="selection"),
            TurnInput(format_selection=FormatType.LIST),
            session,
        )

        assert decision.state == ResolverState.READY
        assert decision.resolved_format == FormatType.LIST
        assert decision.resolved_data_subject == "AAPL"

    def test_subject_selection_completes_pending_format(self, resolver):
        session = Session(
            session_id="s-1", pending_format=FormatType.TABLE, awaiting="data_subject"
        )

        decision = resolver.resolve(
            IntentResult(is_data_request=True, source="selection"),
            TurnInput(subject_selection="tech sector"),
            session,
        )

        assert decision.state == ResolverState.READY
        assert decision.resolved_format == FormatType.TABLE
        assert decision.resolved_data_subject == "tech sector"

    def test_selection_beats_classifier(self, resolver, empty_session):
        decision = resolver.resolve(
            data_intent(FormatType.CHART, "AAPL"),
            TurnInput(
                utterance="chart AAPL",
                format_selection=FormatType.TABLE,
                subject_selection="MSFT",
            ),
            empty_session,
        )

        assert decision.resolved_format == FormatType.TABLE
        assert decision.resolved_data_subject == "MSFT"

    def test_classifier_value_replaces_stale_pending(self, resolver):
        session = Session(
            session_id="s-1", pending_format=FormatType.TABLE, pending_data_subject="AAPL"
        )

        decision = resolver.resolve(
            data_intent(FormatType.CHART, "MSFT"),
            TurnInput(utterance="chart MSFT"),
            session,
        )

        assert decision.resolved_format == FormatType.CHART
        assert decision.resolved_data_subject == "MSFT"

    def test_no_new_signal_keeps_pending(self, resolver):
        session = Session(session_id="s-1", pending_data_subject="AAPL", awaiting="format")

        decision = resolver.resolve(
            data_intent(), TurnInput(utterance="show it"), session
        )

        assert decision.state == ResolverState.NEED_FORMAT
        assert decision.resolved_data_subject == "AAPL"


# ===== Free-Text Clarification Answers =====


class TestFreeTextAnswers:
    """Typed replies answer the awaited slot"""

    def test_typed_subject_answers_awaited_subject(self, resolver):
        session = Session(
            session_id="s-1", pending_format=FormatType.TABLE, awaiting="data_subject"
        )

        # The classifier may read a bare phrase as a general question
        decision = resolver.resolve(GENERAL, TurnInput(utterance="tech sector"), session)

        assert decision.state == ResolverState.READY
        assert decision.resolved_format == FormatType.TABLE
        assert decision.resolved_data_subject == "tech sector"

    def test_typed_format_answers_awaited_format(self, resolver):
        session = Session(session_id="s-1", pending_data_subject="AAPL", awaiting="format")

        decision = resolver.resolve(GENERAL, TurnInput(utterance="chart please"), session)

        assert decision.state == ResolverState.READY
        assert decision.resolved_format == FormatType.CHART
        assert decision.resolved_data_subject == "AAPL"

    def test_question_while_awaiting_is_general(self, resolver):
        session = Session(
            session_id="s-1", pending_format=FormatType.TABLE, awaiting="data_subject"
        )

        decision = resolver.resolve(
            GENERAL, TurnInput(utterance="what is a sector?"), session
        )

        assert decision.state == ResolverState.ANSWER_GENERAL

    def test_question_word_inside_subject_still_answers(self, resolver):
        session = Session(
            session_id="s-1", pending_format=FormatType.TABLE, awaiting="data_subject"
        )

        decision = resolver.resolve(
            GENERAL, TurnInput(utterance="banks that define the sector"), session
        )

        assert decision.state == ResolverState.READY
        assert decision.resolved_data_subject == "banks that define the sector"

    def test_format_word_is_not_a_subject(self, resolver):
        session = Session(
            session_id="s-1", pending_format=FormatType.TABLE, awaiting="data_subject"
        )

        decision = resolver.resolve(GENERAL, TurnInput(utterance="chart"), session)

        assert decision.state == ResolverState.NEED_DATA_SUBJECT

    def test_free_text_ignored_without_outstanding_clarification(self, resolver):
        session = Session(session_id="s-1", pending_format=FormatType.TABLE)

        decision = resolver.resolve(GENERAL, TurnInput(utterance="tech sector"), session)

        assert decision.state == ResolverState.ANSWER_GENERAL
