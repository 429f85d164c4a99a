"""FastAPI dependencies for authentication, sessions and service access."""

import os

from fastapi import Depends, Header, HTTPException, Request, status

from server.utils import redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_ID = "anonymous"


async def get_api_key(request: Request, x_api_key: str | None = Header(None)):
    """Validate API key from X-API-Key header."""
    valid_keys_str = os.getenv("API_KEYS", "")
    request_id = getattr(request.state, "request_id", "unknown")
    redacted_headers = redact_sensitive_headers(dict(request.headers))

    if not valid_keys_str:
        logger.error(
            "API authentication not configured",
            extra={"extra_fields": {"request_id": request_id, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        )

    valid_keys = [k.strip() for k in valid_keys_str.split(",") if k.strip()]

    if not x_api_key or x_api_key not in valid_keys:
        logger.warning(
            "API authentication failed",
            extra={"extra_fields": {"request_id": request_id, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API key"
        )

    return x_api_key


async def get_session_id(x_session_id: str | None = Header(None)) -> str:
    """Session identifier from X-Session-ID; one cache store per session."""
    session_id = (x_session_id or "").strip()
    if len(session_id) > 128:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session id too long")
    return session_id or DEFAULT_SESSION_ID


def get_config():
    """Dependency to get configuration (singleton pattern)."""
    from config.config import Config

    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_search_service():
    """Dependency to get the search service (singleton pattern)."""
    from orchestrator.search_orchestrator import SearchOrchestrator
    from orchestrator.search_service import SearchService
    from tools.web.session_registry import SessionStoreRegistry

    if not hasattr(get_search_service, "_instance"):
        get_search_service._instance = SearchService(
            SearchOrchestrator.from_config(get_config()), SessionStoreRegistry()
        )
    return get_search_service._instance


def get_suggestion_service(session_id: str = Depends(get_session_id)):
    """Dependency to get the session's SuggestionService (one debouncer per session)."""
    from api.search_client import SuggestionClient
    from tools.web.suggestions import SuggestionService

    if not hasattr(get_suggestion_service, "_instances"):
        get_suggestion_service._instances = {}

    instances = get_suggestion_service._instances
    if session_id not in instances:
        config = get_config()
        client = SuggestionClient(
            config.SEARCH_API_BASE_URL,
            timeout_s=config.SEARCH_TIMEOUT_S,
            credential_provider=config.credential_provider(),
        )
        instances[session_id] = SuggestionService(client, delay_s=config.suggestion_debounce_s)
    return instances[session_id]


def drop_suggestion_service(session_id: str) -> bool:
    """Cancel a session's pending suggestion lookup and forget its service (logout)."""
    instances = getattr(get_suggestion_service, "_instances", {})
    service = instances.pop(session_id, None)
    if service is None:
        return False
    service.cancel()
    return True
