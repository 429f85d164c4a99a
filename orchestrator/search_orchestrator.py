"""
SearchOrchestrator - turns one Query into one NormalizedResult.

Key guarantees:
- At most three provider calls, strictly sequential (combined, no-tools, web-only)
- Limit / auth responses are authoritative and end the cascade immediately
- Only total exhaustion raises (SearchFailedError); cancellation raises SearchCancelledError
- No cache writes here; callers own the ResultCacheStore
"""

import asyncio
import time

from api.search_client import CombinedSearchClient, WebSearchClient
from config.config import Config
from models.normalized_result import NormalizedResult, WebResult
from models.search_types import Query
from orchestrator.degradation_classifier import DegradationClassifier
from orchestrator.degradation_types import (
    FailureKind,
    NextAction,
    ProviderResponse,
    SearchFailedError,
    Tier,
    TierAttempt,
)
from orchestrator.fallback_manager import FallbackManager, FallbackPolicy
from orchestrator.query_params import build_search_params, build_web_only_params
from utils.logger import get_logger

logger = get_logger(__name__)


class SearchOrchestrator:
    def __init__(
        self,
        combined_client: CombinedSearchClient,
        web_client: WebSearchClient,
        *,
        classifier: DegradationClassifier | None = None,
        fallback_manager: FallbackManager | None = None,
        policy: FallbackPolicy | None = None,
    ):
        self._combined = combined_client
        self._web = web_client
        self._classifier = classifier or DegradationClassifier.default()
        self._fallback_manager = fallback_manager or FallbackManager()
        self._policy = policy or FallbackPolicy()

    @classmethod
    def from_config(cls, config: Config) -> "SearchOrchestrator":
        """Wire adapters and the phrase table from application configuration."""
        credential_provider = config.credential_provider()
        return cls(
            CombinedSearchClient(
                config.SEARCH_API_BASE_URL,
                timeout_s=config.SEARCH_TIMEOUT_S,
                credential_provider=credential_provider,
            ),
            WebSearchClient(
                config.SEARCH_API_BASE_URL,
                timeout_s=config.SEARCH_TIMEOUT_S,
                credential_provider=credential_provider,
            ),
            classifier=DegradationClassifier.from_yaml(config.DEGRADATION_PHRASES_PATH),
        )

    async def search(self, query: Query, *, cancel: asyncio.Event | None = None) -> NormalizedResult:
        """
        Run the fallback cascade for ``query``.

        Args:
            query: The submitted query, including its filters
            cancel: Optional event; setting it aborts the in-flight provider call

        Returns:
            NormalizedResult from the richest tier that succeeded, or a
            limit/auth result when the server reports one

        Raises:
            SearchFailedError: every eligible tier failed
            SearchCancelledError: ``cancel`` was set mid-flight
        """
        attempts: list[TierAttempt] = []
        search_type = query.category.value

        first = await self._call(Tier.COMBINED, query, attempts, cancel)
        if self._is_success(first):
            return NormalizedResult.from_payload(
                first.payload, search_type=search_type, tier=Tier.COMBINED.value, query_text=query.text
            )

        terminal = self._terminal_result(first, Tier.COMBINED, query)
        if terminal is not None:
            self._record_failure(attempts, self._failure_kind(first))
            return terminal

        first_kind = self._failure_kind(first)
        self._record_failure(attempts, first_kind)
        current_tier, current_kind = Tier.COMBINED, first_kind

        while True:
            decision = self._fallback_manager.decide(
                current_tier=current_tier,
                failure_kind=current_kind,
                first_failure_kind=first_kind,
                attempt_index=len(attempts) - 1,
                policy=self._policy,
            )
            logger.info(
                "Search fallback decision",
                extra={
                    "extra_fields": {
                        "category": search_type,
                        "from_tier": current_tier.value,
                        "action": decision.action.value,
                        "reason": decision.reason,
                    }
                },
            )

            if decision.action == NextAction.STOP:
                raise self._exhausted(first, first_kind, attempts)

            if decision.action == NextAction.RETURN_TERMINAL:
                return self._kind_result(current_kind, current_tier, query)

            if decision.action == NextAction.RETRY_WITHOUT_TOOLS:
                response = await self._call(Tier.NO_TOOLS, query, attempts, cancel)
                if self._is_success(response):
                    return NormalizedResult.from_payload(
                        response.payload,
                        search_type=search_type,
                        tier=Tier.NO_TOOLS.value,
                        query_text=query.text,
                        degraded=True,
                    )
                current_tier = Tier.NO_TOOLS
            else:
                response = await self._call(Tier.WEB_ONLY, query, attempts, cancel)
                if self._is_success(response):
                    web = response.payload.get("traditional") or []
                    return NormalizedResult.web_fallback(
                        tuple(WebResult.from_payload(r) for r in web if isinstance(r, dict)),
                        tier=Tier.WEB_ONLY.value,
                        query_text=query.text,
                    )
                current_tier = Tier.WEB_ONLY

            terminal = self._terminal_result(response, current_tier, query)
            current_kind = self._failure_kind(response)
            self._record_failure(attempts, current_kind)
            if terminal is not None:
                return terminal

    async def _call(
        self,
        tier: Tier,
        query: Query,
        attempts: list[TierAttempt],
        cancel: asyncio.Event | None,
    ) -> ProviderResponse:
        start = time.perf_counter()
        if tier == Tier.WEB_ONLY:
            response = await self._web.search(build_web_only_params(query), cancel=cancel)
        else:
            params = build_search_params(query, disable_tools=tier == Tier.NO_TOOLS)
            response = await self._combined.search(params, cancel=cancel)
        latency_ms = int((time.perf_counter() - start) * 1000)

        attempts.append(TierAttempt(tier=tier, status=response.status, latency_ms=latency_ms))
        logger.info(
            "Search tier completed",
            extra={
                "extra_fields": {
                    "tier": tier.value,
                    "category": query.category.value,
                    "status": response.status,
                    "latency_ms": latency_ms,
                }
            },
        )
        return response

    @staticmethod
    def _is_success(response: ProviderResponse) -> bool:
        return response.ok and response.payload is not None

    @staticmethod
    def _record_failure(attempts: list[TierAttempt], kind: FailureKind) -> None:
        last = attempts[-1]
        attempts[-1] = TierAttempt(
            tier=last.tier, status=last.status, failure_kind=kind, latency_ms=last.latency_ms
        )

    def _failure_kind(self, response: ProviderResponse) -> FailureKind:
        payload = response.payload or {}
        if payload.get("limitReached"):
            if payload.get("authRequired"):
                return FailureKind.AUTHENTICATION_REQUIRED
            return FailureKind.SUBSCRIPTION_LIMIT_REACHED
        if payload.get("authRequired"):
            return FailureKind.AUTHENTICATION_REQUIRED
        return self._classifier.classify(response.text, response.status, response.error_code)

    def _terminal_result(
        self, response: ProviderResponse, tier: Tier, query: Query
    ) -> NormalizedResult | None:
        """Limit and auth conditions carried in the error body end the cascade."""
        payload = response.payload or {}
        if payload.get("limitReached"):
            logger.warning(
                "Search limit reached",
                extra={
                    "extra_fields": {
                        "tier": tier.value,
                        "auth_required": bool(payload.get("authRequired")),
                    }
                },
            )
            return NormalizedResult.limit_reached_result(
                auth_required=bool(payload.get("authRequired")),
                search_type=query.category.value,
                tier=tier.value,
                query_text=query.text,
            )
        if payload.get("authRequired"):
            return NormalizedResult.auth_required_result(
                search_type=query.category.value, tier=tier.value, query_text=query.text
            )
        return None

    def _kind_result(self, kind: FailureKind, tier: Tier, query: Query) -> NormalizedResult:
        if kind == FailureKind.SUBSCRIPTION_LIMIT_REACHED:
            return NormalizedResult.limit_reached_result(
                auth_required=False,
                search_type=query.category.value,
                tier=tier.value,
                query_text=query.text,
            )
        return NormalizedResult.auth_required_result(
            search_type=query.category.value, tier=tier.value, query_text=query.text
        )

    def _exhausted(
        self, first: ProviderResponse, first_kind: FailureKind, attempts: list[TierAttempt]
    ) -> SearchFailedError:
        logger.error(
            "Search failed on every tier",
            extra={
                "extra_fields": {
                    "status": first.status,
                    "failure_kind": first_kind.value,
                    "tiers": [a.tier.value for a in attempts],
                }
            },
        )
        return SearchFailedError(
            first.message,
            status=first.status,
            failure_kind=first_kind,
            attempts=list(attempts),
        )
