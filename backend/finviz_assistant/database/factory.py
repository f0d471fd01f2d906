"""
Session store selection from settings.
"""

import structlog

from ..core.config import Settings
from ..core.exceptions import ConfigurationError
from .redis_store import RedisSessionStore
from .session_store import InMemorySessionStore, JsonFileSessionStore, SessionStore

logger = structlog.get_logger()


def create_session_store(settings: Settings) -> SessionStore:
    """Build the configured backend. Call load() on the result before use."""
    backend = settings.session_backend
    if backend == "file":
        store: SessionStore = JsonFileSessionStore(settings.sessions_file)
    elif backend == "redis":
        store = RedisSessionStore(
            settings.redis_url,
            key_prefix=settings.session_key_prefix,
            ttl_seconds=settings.session_ttl_seconds,
        )
    elif backend == "memory":
        store = InMemorySessionStore()
    else:
        raise ConfigurationError(
            f"Unknown session backend '{backend}'", session_backend=backend
        )

    logger.info("Session store selected", backend=store.backend_name)
    return store
