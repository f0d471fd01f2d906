"""
Message API for the visualization assistant.
Following Factor 11 & 12: Triggerable via API, Stateless Service.

Three operations on /api/message:
- GET    fetch a session's history and visualizations
- POST   run one chat turn
- DELETE reset (delete) a session

Errors are raised as AppError subclasses and mapped to
{"detail", "error_type"} by the application's exception handler.
"""

import structlog
from fastapi import APIRouter, Depends

from ..core.exceptions import ValidationError
from ..services.chat_service import ChatService
from .dependencies.chat_deps import get_chat_service
from .schemas.chat_models import (
    DeleteResponse,
    DeleteSessionRequest,
    HistoryResponse,
    PostTurnRequest,
    TurnResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["message"])


@router.get("/message", response_model=HistoryResponse)
async def get_session_history(
    session_id: str | None = None,
    chat_service: ChatService = Depends(get_chat_service),
) -> HistoryResponse:
    """
    Fetch a session's transcript and visualization history.

    **Query Parameters:**
    - session_id: Session identifier (required)

    **Response:** `{"history": [...], "visualization_history": [...]}`.
    Unknown sessions return empty lists.

    **Errors:**
    - 400: session_id missing
    """
    if not session_id:
        raise ValidationError("Session ID is required.")

    history, visualizations = await chat_service.get_history(session_id)
    return HistoryResponse(history=history, visualization_history=visualizations)


@router.post("/message", response_model=TurnResponse)
async def post_message(
    request: PostTurnRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> TurnResponse:
    """
    Process one chat turn.

    **Request Body:**
    ```json
    {
      "message": "show me a chart for AAPL",
      "session_id": "3f7c1e9a-...",
      "selection": null,
      "data_query": null
    }
    ```

    Send `selection` (table/chart/list) or `data_query` without `message`
    to answer a clarify response.

    **Errors:**
    - 400: selection is not a known format
    - 500: turn failed; the error is also appended to the session history
    """
    logger.info(
        "Turn requested",
        session_id=request.session_id,
        has_message=bool(request.message),
        selection=request.selection,
        has_data_query=bool(request.data_query),
    )

    outcome = await chat_service.post_turn(
        message=request.message,
        session_id=request.session_id,
        selection=request.selection,
        data_query=request.data_query,
    )
    return TurnResponse(
        session_id=outcome.session_id,
        response=outcome.response,
        history=outcome.history,
        visualization_history=outcome.visualization_history,
    )


@router.delete("/message", response_model=DeleteResponse)
async def delete_session(
    request: DeleteSessionRequest | None = None,
    chat_service: ChatService = Depends(get_chat_service),
) -> DeleteResponse:
    """
    Delete a session (chat reset).

    **Request Body:** `{"session_id": "..."}`

    **Errors:**
    - 400: session_id missing
    - 404: session not found
    """
    session_id = request.session_id if request else None
    if not session_id:
        raise ValidationError("Session ID is required.")

    await chat_service.delete_session(session_id)
    logger.info("Session deleted via API", session_id=session_id)
    return DeleteResponse(message="Session deleted successfully.")
