"""Type-ahead suggestion endpoint."""

import asyncio

from fastapi import APIRouter, Depends, Query

from server.dependencies import get_api_key, get_suggestion_service
from server.schemas.responses import SuggestionsResponseDTO
from tools.web.suggestions import SuggestionService

router = APIRouter(prefix="/v1", tags=["Suggestions"])


@router.get("/suggestions", response_model=SuggestionsResponseDTO)
async def suggestions(
    q: str = Query("", max_length=400),
    debounce: bool = Query(True),
    api_key: str = Depends(get_api_key),
    service: SuggestionService = Depends(get_suggestion_service),
):
    """
    Suggestions for a partial query.

    With ``debounce`` (the default) a newer request from the same session
    within the quiet period supersedes this one, which then returns an empty
    list flagged ``superseded``.
    """
    if not debounce:
        return SuggestionsResponseDTO(suggestions=await service.suggest(q))

    future = service.suggest_debounced(q)
    await asyncio.wait([future])
    if future.cancelled():
        return SuggestionsResponseDTO(suggestions=[], superseded=True)
    return SuggestionsResponseDTO(suggestions=future.result())
