"""
Redis-backed session store.
Following Factor 3: External Dependencies as Services.

Each session lives under its own key (prefix + session id) as a JSON string,
so concurrent workers share state without rewriting a whole file.
"""

from typing import Any

import redis.asyncio as redis
import structlog
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import StorageError
from ..models.session import Session
from .session_store import SessionStore

logger = structlog.get_logger()


class RedisSessionStore(SessionStore):
    """Redis connection manager storing one JSON document per session."""

    backend_name = "redis"

    def __init__(
        self,
        redis_url: str,
        key_prefix: str = "finviz:session:",
        ttl_seconds: int | None = None,
    ) -> None:
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self.client: redis.Redis | None = None

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def _require_client(self) -> redis.Redis:
        if not self.client:
            raise StorageError("Redis connection not established", backend="redis")
        return self.client

    async def load(self) -> None:
        """Establish connection to Redis."""
        try:
            self.client = redis.from_url(self.redis_url, decode_responses=True)

            # Test connection
            await self.client.ping()

            logger.info("Redis connection established", url=self.redis_url)

        except Exception as e:
            logger.error("Failed to connect to Redis", error=str(e))
            raise

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.close()
            logger.info("Redis connection closed")

    async def health_check(self) -> dict[str, Any]:
        """Check Redis connection health."""
        try:
            if not self.client:
                return {
                    "connected": False,
                    "backend": self.backend_name,
                    "error": "No client connection",
                }

            await self.client.ping()
            info = await self.client.info()

            return {
                "connected": True,
                "backend": self.backend_name,
                "version": info.get("redis_version", "unknown"),
                "memory_usage": info.get("used_memory_human", "unknown"),
            }

        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return {"connected": False, "backend": self.backend_name, "error": str(e)}

    async def get(self, session_id: str) -> Session | None:
        """
        Fetch a session.

        A read failure raises StorageError: treating it as "unknown session"
        would silently fork the conversation into a new one.
        """
        client = self._require_client()
        try:
            value = await client.get(self._key(session_id))
        except Exception as e:
            logger.error("Redis get operation failed", session_id=session_id, error=str(e))
            raise StorageError(
                "Failed to read session", backend="redis", session_id=session_id
            ) from e

        if not value:
            logger.debug("Session not found", session_id=session_id)
            return None

        try:
            return Session.model_validate_json(value)
        except PydanticValidationError as e:
            logger.warning(
                "Stored session is unreadable, ignoring",
                session_id=session_id,
                error=str(e),
            )
            return None

    async def put(self, session: Session) -> None:
        """Write a session. Failures are logged and the turn carries on."""
        client = self._require_client()
        try:
            await client.set(
                self._key(session.session_id),
                session.model_dump_json(),
                ex=self.ttl_seconds,
            )
        except Exception as e:
            logger.error(
                "Redis set operation failed",
                session_id=session.session_id,
                error=str(e),
            )

    async def delete(self, session_id: str) -> bool:
        client = self._require_client()
        try:
            result: int = await client.delete(self._key(session_id))
            return result > 0
        except Exception as e:
            logger.error(
                "Redis delete operation failed", session_id=session_id, error=str(e)
            )
            raise StorageError(
                "Failed to delete session", backend="redis", session_id=session_id
            ) from e
