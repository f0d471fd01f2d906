"""
Chat service for visualization conversations.
Business logic layer coordinating the session store and the turn pipeline.
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import structlog

from ..agent.pipeline import TurnPipeline
from ..agent.state import AgentResponse, TurnInput
from ..core.exceptions import NotFoundError, TurnProcessingError, ValidationError
from ..database.session_store import SessionStore
from ..models.session import FormatType, Message, Session, VisualizationRecord

logger = structlog.get_logger()


@dataclass
class _SessionLock:
    """Per-session lock plus the number of turns holding or waiting for it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


@dataclass
class TurnOutcome:
    """Result of one posted turn."""

    session_id: str
    response: AgentResponse
    history: list[Message]
    visualization_history: list[VisualizationRecord]


class ChatService:
    """Service for session lifecycle and turn processing."""

    def __init__(self, store: SessionStore, pipeline: TurnPipeline):
        """
        Initialize chat service.

        Args:
            store: Session persistence backend
            pipeline: Turn pipeline (classifier, resolver, synthesizer, responder)
        """
        self.store = store
        self.pipeline = pipeline
        self._locks: dict[str, _SessionLock] = {}

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncIterator[None]:
        """Serialize work on one session. The entry is dropped once nobody holds or awaits it."""
        entry = self._locks.get(session_id)
        if entry is None:
            entry = self._locks[session_id] = _SessionLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(session_id) is entry:
                del self._locks[session_id]

    async def get_history(
        self, session_id: str
    ) -> tuple[list[Message], list[VisualizationRecord]]:
        """
        Fetch a session's transcript and visualizations.

        Unknown session ids return empty lists rather than an error.
        """
        session = await self.store.get(session_id)
        if session is None:
            logger.info("History requested for unknown session", session_id=session_id)
            return [], []
        return list(session.history), list(session.visualization_history)

    async def post_turn(
        self,
        message: str | None = None,
        session_id: str | None = None,
        selection: str | None = None,
        data_query: str | None = None,
    ) -> TurnOutcome:
        """
        Process one chat turn.

        Args:
            message: New user utterance, if typed
            session_id: Existing session id; absent or unknown creates a session
            selection: Format picked from clarify options (table/chart/list)
            data_query: Data subject picked or entered for a clarification

        Returns:
            TurnOutcome with the response and the full updated session lists

        Raises:
            ValidationError: If selection is not a known format
            TurnProcessingError: If the pipeline fails past its fallbacks
        """
        format_selection = None
        if selection:
            format_selection = FormatType.parse(selection)
            if format_selection is None:
                raise ValidationError(
                    f"Unknown format selection '{selection}'. Expected table, chart or list.",
                    selection=selection,
                )

        utterance = message.strip() if message and message.strip() else None
        subject_selection = data_query.strip() if data_query and data_query.strip() else None

        session = await self.store.get(session_id) if session_id else None
        if session is None:
            session = Session(session_id=session_id or str(uuid.uuid4()))
            logger.info("Session created", session_id=session.session_id)

        async with self._session_lock(session.session_id):
            # Re-read under the lock so a turn that finished meanwhile is not lost
            current = await self.store.get(session.session_id)
            if current is not None:
                session = current

            if utterance:
                session.add_message("user", utterance)
            if format_selection is not None:
                session.pending_format = format_selection
            if subject_selection:
                session.pending_data_subject = subject_selection
            await self.store.put(session)

            turn = TurnInput(
                utterance=utterance,
                format_selection=format_selection,
                subject_selection=subject_selection,
            )

            try:
                result = await self.pipeline.run(session, turn)
            except Exception as e:
                logger.error(
                    "Turn processing failed",
                    session_id=session.session_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                session.add_message("bot", f"Error: {e}")
                await self.store.put(session)
                raise TurnProcessingError(
                    f"Failed to process message: {e}", session_id=session.session_id
                ) from e

            result.delta.apply_to(session)
            await self.store.put(session)

        logger.info(
            "Turn processed",
            session_id=session.session_id,
            response_type=result.response.type,
            history_length=len(session.history),
            visualization_count=len(session.visualization_history),
        )
        return TurnOutcome(
            session_id=session.session_id,
            response=result.response,
            history=list(session.history),
            visualization_history=list(session.visualization_history),
        )

    async def delete_session(self, session_id: str) -> None:
        """
        Delete a session.

        Raises:
            NotFoundError: If the session does not exist
        """
        async with self._session_lock(session_id):
            removed = await self.store.delete(session_id)

        if not removed:
            raise NotFoundError("Session not found.", session_id=session_id)
        logger.info("Session deleted", session_id=session_id)
