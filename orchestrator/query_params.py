"""Translate a Query and its FilterSet into provider request parameters."""

from models.search_types import DEFAULT_FILTERS, Query, all_enabled, enabled_keys

TRADITIONAL_TYPE = "traditional"


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


def build_search_params(query: Query, *, disable_tools: bool = False) -> dict[str, str]:
    """
    Build the combined-endpoint parameters for Tier 1 (and Tier 2 with ``disable_tools``).

    Each filter is sent only when it differs from its default so requests
    stay minimal. Source and content-type lists are omitted when every
    entry is enabled, or when none is.
    """
    params: dict[str, str] = {"q": query.text, "type": query.category.value}

    if query.is_follow_up:
        params["isFollowUp"] = "true"

    if query.deep_research is not None:
        opts = query.deep_research
        params["deepResearch"] = "true"
        params["maxIterations"] = str(opts.max_iterations)
        params["includeReasoning"] = _bool_param(opts.include_reasoning)
        params["deepDive"] = _bool_param(opts.deep_dive)
        params["searchContextSize"] = opts.search_context_size

    filters = query.filters
    defaults = DEFAULT_FILTERS

    if filters.time_range != defaults.time_range:
        params["timeRange"] = filters.time_range

    if filters.region != defaults.region:
        params["region"] = filters.region

    if not all_enabled(filters.sources):
        sources = enabled_keys(filters.sources)
        if sources:
            params["sources"] = ",".join(sources)

    if not all_enabled(filters.content_type):
        content_types = enabled_keys(filters.content_type)
        if content_types:
            params["contentTypes"] = ",".join(content_types)

    prefs = filters.ai_preferences
    if prefs.model != defaults.ai_preferences.model:
        params["model"] = prefs.model
    if prefs.detail_level != defaults.ai_preferences.detail_level:
        params["aiDetailLevel"] = prefs.detail_level
    if prefs.citation_style != defaults.ai_preferences.citation_style:
        params["aiCitationStyle"] = prefs.citation_style

    if disable_tools:
        params["disableTools"] = "true"

    return params


def build_web_only_params(query: Query) -> dict[str, str]:
    """Tier 3 parameters: the query text and the traditional type, nothing AI-related."""
    return {"q": query.text, "type": TRADITIONAL_TYPE}
