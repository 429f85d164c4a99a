"""
Models package for queries, filters and normalized search results.
"""

from .normalized_result import AIAnswer, ImageRef, NormalizedResult, Source, WebResult
from .search_types import (
    Category,
    DeepResearchOptions,
    FilterSet,
    Query,
)

__all__ = [
    "AIAnswer",
    "Category",
    "DeepResearchOptions",
    "FilterSet",
    "ImageRef",
    "NormalizedResult",
    "Query",
    "Source",
    "WebResult",
]
