"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from models.normalized_result import NormalizedResult


class SourceDTO(BaseModel):
    title: str
    url: str
    domain: str = ""


class AIAnswerDTO(BaseModel):
    answer: str
    sources: list[SourceDTO] = Field(default_factory=list)
    model: str
    degraded: bool = False
    contextual: bool | None = None


class WebResultDTO(BaseModel):
    title: str
    url: str
    snippet: str = ""
    domain: str = ""
    date: str | None = None
    image: dict[str, Any] | None = None


class SearchResponseDTO(BaseModel):
    ai: AIAnswerDTO
    traditional: list[WebResultDTO] = Field(default_factory=list)
    limit_reached: bool = False
    auth_required: bool = False
    search_type: str
    tier: str | None = None
    query: str | None = None
    cache_hit: bool = False
    created_at: str

    @classmethod
    def from_normalized_result(cls, result: NormalizedResult, cache_hit: bool = False):
        """Convert NormalizedResult to DTO."""
        return cls(
            ai=AIAnswerDTO(
                answer=result.ai.answer,
                sources=[
                    SourceDTO(title=s.title, url=s.url, domain=s.domain) for s in result.ai.sources
                ],
                model=result.ai.model,
                degraded=result.ai.degraded,
                contextual=result.ai.contextual,
            ),
            traditional=[WebResultDTO(**r.to_dict()) for r in result.traditional],
            limit_reached=result.limit_reached,
            auth_required=result.auth_required,
            search_type=result.search_type,
            tier=result.tier,
            query=result.query_text,
            cache_hit=cache_hit,
            created_at=result.created_at,
        )


class CachedEntryDTO(BaseModel):
    category: str
    searched: bool
    result: SearchResponseDTO | None = None


class SearchFailureDTO(BaseModel):
    message: str
    status: int
    failure_kind: str
    tiers: list[str] = Field(default_factory=list)


class FiltersResponseDTO(BaseModel):
    filters: dict[str, Any]
    searched: dict[str, bool]


class SuggestionsResponseDTO(BaseModel):
    suggestions: list[str]
    superseded: bool = False


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
