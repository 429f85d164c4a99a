"""Search endpoints: run a blended search and read the per-category cache."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from orchestrator.degradation_types import SearchCancelledError, SearchFailedError
from orchestrator.search_service import SearchService
from server.dependencies import get_api_key, get_search_service, get_session_id
from server.schemas.requests import SearchRequest
from server.schemas.responses import CachedEntryDTO, SearchFailureDTO, SearchResponseDTO
from server.utils import parse_category
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])


@router.post("/search", response_model=SearchResponseDTO)
async def search(
    request: Request,
    body: SearchRequest,
    api_key: str = Depends(get_api_key),
    session_id: str = Depends(get_session_id),
    service: SearchService = Depends(get_search_service),
):
    """Run the fallback cascade for one query, or serve the category's fresh cached result."""
    request_id = getattr(request.state, "request_id", "unknown")

    try:
        outcome = await service.search(
            session_id,
            body.q,
            body.category,
            is_follow_up=body.is_follow_up,
            deep_research=body.deep_research.to_options() if body.deep_research else None,
            refresh=body.refresh,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SearchCancelledError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Search superseded by a newer search for this category",
        )
    except SearchFailedError as e:
        logger.error(
            "Search failed",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "category": body.category.value,
                    "upstream_status": e.status,
                    "failure_kind": e.failure_kind.value,
                }
            },
        )
        failure = SearchFailureDTO(
            message=e.message,
            status=e.status,
            failure_kind=e.failure_kind.value,
            tiers=[a.tier.value for a in e.attempts],
        )
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=failure.model_dump())

    logger.info(
        "Search completed",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "category": body.category.value,
                "tier": outcome.result.tier,
                "cache_hit": outcome.cache_hit,
                "limit_reached": outcome.result.limit_reached,
            }
        },
    )
    return SearchResponseDTO.from_normalized_result(outcome.result, cache_hit=outcome.cache_hit)


@router.get("/search/cache/{category}", response_model=CachedEntryDTO)
async def cached_result(
    category: str,
    api_key: str = Depends(get_api_key),
    session_id: str = Depends(get_session_id),
    service: SearchService = Depends(get_search_service),
):
    """Read a category's cached entry without searching."""
    key = parse_category(category)
    entry = service.registry.get_or_create(session_id).get(key)
    return CachedEntryDTO(
        category=key.value,
        searched=entry.searched,
        result=(
            SearchResponseDTO.from_normalized_result(entry.result, cache_hit=True)
            if entry.result
            else None
        ),
    )
