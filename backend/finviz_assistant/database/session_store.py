"""
Session persistence.
Following Factor 3: External Dependencies as Services.

SessionStore is the abstract get/put/delete contract the chat service relies
on. Backends:
- InMemorySessionStore: process-local, nothing survives a restart
- JsonFileSessionStore: load everything at startup, rewrite the whole file
  on every mutation (best effort; write failures are logged, not raised)
- RedisSessionStore (redis_store.py): one key per session
"""

import asyncio
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..models.session import Session

logger = structlog.get_logger()


class SessionStore(ABC):
    """Key-value store of sessions keyed by session id."""

    backend_name: str = "abstract"

    async def load(self) -> None:
        """Prepare the store at startup. Default: nothing to load."""

    async def close(self) -> None:
        """Release resources at shutdown."""

    @abstractmethod
    async def get(self, session_id: str) -> Session | None:
        """Return a copy of the session, or None if unknown."""

    @abstractmethod
    async def put(self, session: Session) -> None:
        """Insert or replace a session."""

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove a session. Returns False if it did not exist."""

    async def health_check(self) -> dict[str, Any]:
        return {"connected": True, "backend": self.backend_name}


class InMemorySessionStore(SessionStore):
    """Process-local session map."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def get(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def put(self, session: Session) -> None:
        self._sessions[session.session_id] = session.model_copy(deep=True)

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def health_check(self) -> dict[str, Any]:
        return {
            "connected": True,
            "backend": self.backend_name,
            "session_count": len(self),
        }

    def __len__(self) -> int:
        return len(self._sessions)


class JsonFileSessionStore(InMemorySessionStore):
    """
    In-memory map mirrored to a single JSON file.

    The file holds {session_id: session} and is rewritten in full after every
    put/delete. Concurrent writers in different processes can lose updates.
    """

    backend_name = "file"

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self.last_write_error: str | None = None
        self._write_lock = asyncio.Lock()

    async def load(self) -> None:
        """Load all sessions; a missing file is created empty."""
        if not self.path.exists():
            logger.info("Sessions file does not exist, creating", path=str(self.path))
            await self._write_file()
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(
                "Failed to load sessions file, starting empty",
                path=str(self.path),
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        if not isinstance(raw, dict):
            logger.error("Sessions file is not a JSON object, starting empty")
            return

        for session_id, data in raw.items():
            try:
                session = Session.model_validate(data)
            except PydanticValidationError as e:
                logger.warning(
                    "Skipping unreadable session", session_id=session_id, error=str(e)
                )
                continue
            self._sessions[session.session_id] = session

        logger.info(
            "Sessions loaded", path=str(self.path), session_count=len(self._sessions)
        )

    async def put(self, session: Session) -> None:
        await super().put(session)
        await self._write_file()

    async def delete(self, session_id: str) -> bool:
        removed = await super().delete(session_id)
        if removed:
            await self._write_file()
        return removed

    async def health_check(self) -> dict[str, Any]:
        status = await super().health_check()
        status["path"] = str(self.path)
        if self.last_write_error:
            status["last_write_error"] = self.last_write_error
        return status

    async def _write_file(self) -> None:
        """Rewrite the whole file off the event loop. Failures are logged and remembered, never raised."""
        async with self._write_lock:
            payload = {
                session_id: session.model_dump(mode="json")
                for session_id, session in self._sessions.items()
            }
            await asyncio.to_thread(self._write_payload, payload)

    def _write_payload(self, payload: dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            self.last_write_error = str(e)
            logger.error(
                "Failed to save sessions file",
                path=str(self.path),
                error=str(e),
                session_count=len(payload),
            )
            return

        self.last_write_error = None
        logger.debug("Sessions saved", path=str(self.path), session_count=len(payload))
