from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

MAX_QUERY_CHARS = 400


class Category(str, Enum):
    ALL = "all"
    AI = "ai"
    WEB = "web"
    RESEARCH = "research"
    IMAGES = "images"
    VIDEOS = "videos"
    NEWS = "news"
    SHOPPING = "shopping"
    SOCIAL = "social"
    MAPS = "maps"
    ACADEMIC = "academic"


TIME_RANGES = ("any", "past24h", "pastWeek", "pastMonth", "pastYear")
AI_MODELS = ("auto", "comprehensive", "fast")
DETAIL_LEVELS = ("concise", "detailed", "comprehensive")
CITATION_STYLES = ("inline", "endnotes", "academic")
SEARCH_CONTEXT_SIZES = ("low", "medium", "high")


def _check_choice(name: str, value: str, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {value!r}")


@dataclass(frozen=True)
class SourceFilters:
    news: bool = True
    blogs: bool = True
    academic: bool = True
    social: bool = True
    commercial: bool = True


@dataclass(frozen=True)
class ContentTypeFilters:
    text: bool = True
    images: bool = True
    videos: bool = True


@dataclass(frozen=True)
class AIPreferences:
    model: str = "auto"
    detail_level: str = "detailed"
    citation_style: str = "inline"

    def __post_init__(self):
        _check_choice("model", self.model, AI_MODELS)
        _check_choice("detail_level", self.detail_level, DETAIL_LEVELS)
        _check_choice("citation_style", self.citation_style, CITATION_STYLES)


def _merge_section(current, partial: dict[str, Any] | None):
    """Field-by-field merge of one nested filter section."""
    if not partial:
        return current
    known = {f.name for f in fields(current)}
    unknown = set(partial) - known
    if unknown:
        raise ValueError(f"Unknown {type(current).__name__} keys: {sorted(unknown)}")
    for key, value in partial.items():
        if isinstance(getattr(current, key), bool) and not isinstance(value, bool):
            raise ValueError(f"{type(current).__name__}.{key} must be a boolean")
    return replace(current, **partial)


def enabled_keys(section) -> list[str]:
    return [f.name for f in fields(section) if getattr(section, f.name)]


def all_enabled(section) -> bool:
    return all(getattr(section, f.name) for f in fields(section))


@dataclass(frozen=True)
class FilterSet:
    time_range: str = "any"
    region: str = "global"
    sources: SourceFilters = field(default_factory=SourceFilters)
    content_type: ContentTypeFilters = field(default_factory=ContentTypeFilters)
    ai_preferences: AIPreferences = field(default_factory=AIPreferences)

    def __post_init__(self):
        _check_choice("time_range", self.time_range, TIME_RANGES)
        if not self.region or not self.region.strip():
            raise ValueError("region must not be empty")

    def merged(self, partial: dict[str, Any]) -> "FilterSet":
        """
        Return a new FilterSet with ``partial`` applied.

        Nested sections (sources, content_type, ai_preferences) are merged
        field by field, so ``{"sources": {"news": False}}`` leaves the other
        source toggles untouched.
        """
        unknown = set(partial) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError(f"Unknown filter keys: {sorted(unknown)}")

        return FilterSet(
            time_range=partial.get("time_range", self.time_range),
            region=partial.get("region", self.region),
            sources=_merge_section(self.sources, partial.get("sources")),
            content_type=_merge_section(self.content_type, partial.get("content_type")),
            ai_preferences=_merge_section(self.ai_preferences, partial.get("ai_preferences")),
        )

    def cache_key(self) -> tuple:
        return (
            self.time_range,
            self.region,
            tuple(enabled_keys(self.sources)),
            tuple(enabled_keys(self.content_type)),
            self.ai_preferences.model,
            self.ai_preferences.detail_level,
            self.ai_preferences.citation_style,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeRange": self.time_range,
            "region": self.region,
            "sources": {f.name: getattr(self.sources, f.name) for f in fields(self.sources)},
            "contentType": {
                f.name: getattr(self.content_type, f.name) for f in fields(self.content_type)
            },
            "aiPreferences": {
                "model": self.ai_preferences.model,
                "detailLevel": self.ai_preferences.detail_level,
                "citationStyle": self.ai_preferences.citation_style,
            },
        }


DEFAULT_FILTERS = FilterSet()


@dataclass(frozen=True)
class DeepResearchOptions:
    max_iterations: int = 3
    include_reasoning: bool = True
    deep_dive: bool = False
    search_context_size: str = "medium"

    def __post_init__(self):
        if not 1 <= self.max_iterations <= 10:
            raise ValueError("max_iterations must be between 1 and 10")
        _check_choice("search_context_size", self.search_context_size, SEARCH_CONTEXT_SIZES)


@dataclass(frozen=True)
class Query:
    text: str
    category: Category = Category.ALL
    is_follow_up: bool = False
    filters: FilterSet = field(default_factory=FilterSet)
    deep_research: DeepResearchOptions | None = None

    def __post_init__(self):
        text = (self.text or "").strip()
        if not text:
            raise ValueError("Query text must not be empty")
        if len(text) > MAX_QUERY_CHARS:
            raise ValueError(f"Query text exceeds {MAX_QUERY_CHARS} characters")
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "category", Category(self.category))

    def dedupe_key(self) -> tuple:
        return (
            self.category.value,
            self.text,
            self.is_follow_up,
            self.filters.cache_key(),
            self.deep_research,
        )
