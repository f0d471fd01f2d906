"""
Dependencies for message API endpoints.
"""

from fastapi import Request

from ...database.session_store import SessionStore
from ...services.chat_service import ChatService


def get_session_store(request: Request) -> SessionStore:
    """Get the session store from app state."""
    store: SessionStore = request.app.state.session_store
    return store


def get_chat_service(request: Request) -> ChatService:
    """Get the chat service from app state (one per process, owns the session locks)."""
    service: ChatService = request.app.state.chat_service
    return service
