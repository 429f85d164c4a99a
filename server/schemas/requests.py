"""Pydantic request models for FastAPI endpoints."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from models.search_types import MAX_QUERY_CHARS, Category, DeepResearchOptions


class DeepResearchRequest(BaseModel):
    max_iterations: int = Field(3, ge=1, le=10)
    include_reasoning: bool = True
    deep_dive: bool = False
    search_context_size: Literal["low", "medium", "high"] = "medium"

    def to_options(self) -> DeepResearchOptions:
        return DeepResearchOptions(
            max_iterations=self.max_iterations,
            include_reasoning=self.include_reasoning,
            deep_dive=self.deep_dive,
            search_context_size=self.search_context_size,
        )


class SearchRequest(BaseModel):
    q: str = Field(..., min_length=1, max_length=MAX_QUERY_CHARS)
    category: Category = Category.ALL
    is_follow_up: bool = False
    deep_research: Optional[DeepResearchRequest] = None
    refresh: bool = False


class SourceFiltersPatch(BaseModel):
    news: Optional[bool] = None
    blogs: Optional[bool] = None
    academic: Optional[bool] = None
    social: Optional[bool] = None
    commercial: Optional[bool] = None


class ContentTypeFiltersPatch(BaseModel):
    text: Optional[bool] = None
    images: Optional[bool] = None
    videos: Optional[bool] = None


class AIPreferencesPatch(BaseModel):
    model: Optional[Literal["auto", "comprehensive", "fast"]] = None
    detail_level: Optional[Literal["concise", "detailed", "comprehensive"]] = None
    citation_style: Optional[Literal["inline", "endnotes", "academic"]] = None


class FiltersPatchRequest(BaseModel):
    time_range: Optional[Literal["any", "past24h", "pastWeek", "pastMonth", "pastYear"]] = None
    region: Optional[str] = Field(None, min_length=1, max_length=16)
    sources: Optional[SourceFiltersPatch] = None
    content_type: Optional[ContentTypeFiltersPatch] = None
    ai_preferences: Optional[AIPreferencesPatch] = None

    def to_partial(self) -> dict:
        """Only the fields the client actually sent, nested sections included."""
        return self.model_dump(exclude_none=True)
