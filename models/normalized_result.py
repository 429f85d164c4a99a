from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

FALLBACK_MODEL = "error-fallback"
LIMIT_REACHED_MODEL = "limit-reached"

FALLBACK_APOLOGY = (
    "I'm sorry, our AI answer service is temporarily unavailable. "
    "Here are the web results we found for your search."
)
AUTH_REQUIRED_MESSAGE = (
    "You've reached your free search limit. "
    "Please sign in or create an account to continue searching."
)
SUBSCRIPTION_LIMIT_MESSAGE = (
    "You've reached your subscription limit. "
    "Please upgrade your subscription to continue searching."
)


def domain_from_url(url: str) -> str:
    host = urlparse(url).hostname or ""
    return host[4:] if host.startswith("www.") else host


@dataclass(frozen=True)
class Source:
    title: str
    url: str
    domain: str = ""

    @classmethod
    def from_payload(cls, item: dict[str, Any]) -> "Source":
        url = str(item.get("url") or "")
        return cls(
            title=str(item.get("title") or url),
            url=url,
            domain=str(item.get("domain") or domain_from_url(url)),
        )


@dataclass(frozen=True)
class ImageRef:
    url: str
    alt: str | None = None


@dataclass(frozen=True)
class WebResult:
    title: str
    url: str
    snippet: str = ""
    domain: str = ""
    date: str | None = None
    image: ImageRef | None = None

    @classmethod
    def from_payload(cls, item: dict[str, Any]) -> "WebResult":
        url = str(item.get("url") or "")
        image = item.get("image")
        return cls(
            title=str(item.get("title") or url),
            url=url,
            snippet=str(item.get("snippet") or item.get("content") or ""),
            domain=str(item.get("domain") or domain_from_url(url)),
            date=item.get("date"),
            image=(
                ImageRef(url=str(image.get("url") or ""), alt=image.get("alt"))
                if isinstance(image, dict) and image.get("url")
                else None
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "snippet": self.snippet,
            "domain": self.domain,
        }
        if self.date:
            data["date"] = self.date
        if self.image:
            data["image"] = {"url": self.image.url, "alt": self.image.alt}
        return data


@dataclass(frozen=True)
class AIAnswer:
    answer: str
    model: str
    sources: tuple[Source, ...] = ()
    degraded: bool = False
    contextual: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "answer": self.answer,
            "sources": [
                {"title": s.title, "url": s.url, "domain": s.domain} for s in self.sources
            ],
            "model": self.model,
            "degraded": self.degraded,
        }
        if self.contextual is not None:
            data["contextual"] = self.contextual
        return data


@dataclass(frozen=True)
class NormalizedResult:
    ai: AIAnswer
    traditional: tuple[WebResult, ...] = ()
    limit_reached: bool = False
    auth_required: bool = False
    search_type: str = "all"
    tier: str | None = None
    query_text: str | None = None
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat() + "Z")

    def __post_init__(self):
        if self.limit_reached and self.traditional:
            raise ValueError("A limit-reached result cannot carry web results")

    @property
    def is_terminal(self) -> bool:
        return self.limit_reached or self.auth_required

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        *,
        search_type: str,
        tier: str,
        query_text: str | None = None,
        degraded: bool = False,
    ) -> "NormalizedResult":
        """Build a result from a successful provider body."""
        ai = payload.get("ai") if isinstance(payload.get("ai"), dict) else {}
        web = payload.get("traditional") if isinstance(payload.get("traditional"), list) else []
        return cls(
            ai=AIAnswer(
                answer=str(ai.get("answer") or ""),
                model=str(ai.get("model") or "unknown"),
                sources=tuple(
                    Source.from_payload(s) for s in (ai.get("sources") or []) if isinstance(s, dict)
                ),
                degraded=degraded,
                contextual=ai.get("contextual"),
            ),
            traditional=tuple(WebResult.from_payload(r) for r in web if isinstance(r, dict)),
            search_type=str(payload.get("searchType") or search_type),
            tier=tier,
            query_text=query_text,
        )

    @classmethod
    def limit_reached_result(
        cls, *, auth_required: bool, search_type: str, tier: str, query_text: str | None = None
    ) -> "NormalizedResult":
        return cls(
            ai=AIAnswer(
                answer=AUTH_REQUIRED_MESSAGE if auth_required else SUBSCRIPTION_LIMIT_MESSAGE,
                model=LIMIT_REACHED_MODEL,
                contextual=False,
            ),
            limit_reached=True,
            auth_required=auth_required,
            search_type=search_type,
            tier=tier,
            query_text=query_text,
        )

    @classmethod
    def auth_required_result(
        cls, *, search_type: str, tier: str, query_text: str | None = None
    ) -> "NormalizedResult":
        return cls(
            ai=AIAnswer(answer=AUTH_REQUIRED_MESSAGE, model=LIMIT_REACHED_MODEL, contextual=False),
            auth_required=True,
            search_type=search_type,
            tier=tier,
            query_text=query_text,
        )

    @classmethod
    def web_fallback(
        cls, web_results: tuple[WebResult, ...], *, tier: str, query_text: str | None = None
    ) -> "NormalizedResult":
        return cls(
            ai=AIAnswer(answer=FALLBACK_APOLOGY, model=FALLBACK_MODEL, degraded=True),
            traditional=web_results,
            search_type="traditional",
            tier=tier,
            query_text=query_text,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ai": self.ai.to_dict(),
            "traditional": [r.to_dict() for r in self.traditional],
            "limitReached": self.limit_reached,
            "authRequired": self.auth_required,
            "searchType": self.search_type,
            "tier": self.tier,
            "query": self.query_text,
            "createdAt": self.created_at,
        }
