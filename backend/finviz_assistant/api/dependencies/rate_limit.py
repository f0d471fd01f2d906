"""
Rate limiting dependencies for API endpoints.

Uses slowapi; storage comes from settings (memory:// for a single process,
a Redis URI to share limits across workers).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from ...core.config import get_settings

_settings = get_settings()

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{_settings.rate_limit_requests}/minute"],
    storage_uri=_settings.rate_limit_storage_uri,
)
