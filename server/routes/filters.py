"""Filter endpoints. Any change invalidates every category's cached result."""

from fastapi import APIRouter, Depends, HTTPException, status

from orchestrator.search_service import SearchService
from server.dependencies import get_api_key, get_search_service, get_session_id
from server.schemas.requests import FiltersPatchRequest
from server.schemas.responses import FiltersResponseDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Filters"])


def _filters_response(store) -> FiltersResponseDTO:
    return FiltersResponseDTO(filters=store.filters.to_dict(), searched=store.searched_categories())


@router.get("/filters", response_model=FiltersResponseDTO)
async def get_filters(
    api_key: str = Depends(get_api_key),
    session_id: str = Depends(get_session_id),
    service: SearchService = Depends(get_search_service),
):
    return _filters_response(service.registry.get_or_create(session_id))


@router.patch("/filters", response_model=FiltersResponseDTO)
async def update_filters(
    body: FiltersPatchRequest,
    api_key: str = Depends(get_api_key),
    session_id: str = Depends(get_session_id),
    service: SearchService = Depends(get_search_service),
):
    store = service.registry.get_or_create(session_id)
    try:
        store.set_filters(body.to_partial())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(
        "Filters updated",
        extra={"extra_fields": {"session_id": session_id, "fields": sorted(body.to_partial())}},
    )
    return _filters_response(store)


@router.delete("/filters", response_model=FiltersResponseDTO)
async def reset_filters(
    api_key: str = Depends(get_api_key),
    session_id: str = Depends(get_session_id),
    service: SearchService = Depends(get_search_service),
):
    store = service.registry.get_or_create(session_id)
    store.reset_filters()
    return _filters_response(store)
