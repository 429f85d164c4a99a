"""Session teardown endpoint (logout)."""

from fastapi import APIRouter, Depends

from orchestrator.search_service import SearchService
from server.dependencies import (
    drop_suggestion_service,
    get_api_key,
    get_search_service,
    get_session_id,
)
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Session"])


@router.delete("/session")
async def end_session(
    api_key: str = Depends(get_api_key),
    session_id: str = Depends(get_session_id),
    service: SearchService = Depends(get_search_service),
):
    """Cancel pending searches and suggestions, and drop the session's result cache."""
    dropped = service.end_session(session_id)
    suggestions_dropped = drop_suggestion_service(session_id)
    logger.info(
        "Session ended",
        extra={
            "extra_fields": {
                "session_id": session_id,
                "cache_dropped": dropped,
                "suggestions_dropped": suggestions_dropped,
            }
        },
    )
    return {"session_id": session_id, "dropped": dropped}
