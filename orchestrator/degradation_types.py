from dataclasses import dataclass
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    TOOL_UNAVAILABLE = "ToolUnavailable"
    PROVIDER_UNAVAILABLE = "ProviderUnavailable"
    WEB_SEARCH_UNAVAILABLE = "WebSearchUnavailable"
    SUBSCRIPTION_LIMIT_REACHED = "SubscriptionLimitReached"
    AUTHENTICATION_REQUIRED = "AuthenticationRequired"
    UNCLASSIFIED = "Unclassified"


TERMINAL_KINDS = frozenset(
    {FailureKind.SUBSCRIPTION_LIMIT_REACHED, FailureKind.AUTHENTICATION_REQUIRED}
)


class Tier(str, Enum):
    COMBINED = "combined"
    NO_TOOLS = "no_tools"
    WEB_ONLY = "web_only"


@dataclass(frozen=True)
class ProviderResponse:
    """Raw outcome of one adapter call. status=0 means no HTTP response arrived."""

    status: int
    text: str = ""
    payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def message(self) -> str:
        if self.payload and self.payload.get("message"):
            return str(self.payload["message"])
        return self.text or f"HTTP {self.status}"

    @property
    def error_code(self) -> str | None:
        if not self.payload:
            return None
        code = self.payload.get("code")
        if not code and isinstance(self.payload.get("error"), dict):
            code = self.payload["error"].get("type") or self.payload["error"].get("code")
        return str(code) if code else None


@dataclass(frozen=True)
class TierAttempt:
    tier: Tier
    status: int
    failure_kind: FailureKind | None = None
    latency_ms: int = 0


class NextAction(str, Enum):
    RETRY_WITHOUT_TOOLS = "retry_without_tools"
    WEB_ONLY = "web_only"
    RETURN_TERMINAL = "return_terminal"
    STOP = "stop"


@dataclass(frozen=True)
class FallbackDecision:
    action: NextAction
    next_tier: Tier | None
    reason: str


class SearchError(Exception):
    """Base class for orchestration errors."""


class SearchFailedError(SearchError):
    """Every eligible tier failed; carries the upstream status and message for display."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        failure_kind: FailureKind,
        attempts: list[TierAttempt] | None = None,
    ):
        super().__init__(f"Search failed: {status} {message}")
        self.message = message
        self.status = status
        self.failure_kind = failure_kind
        self.attempts: list[TierAttempt] = attempts or []


class SearchCancelledError(SearchError):
    """The caller signalled cancellation while a provider call was in flight."""
