from dataclasses import dataclass

from orchestrator.degradation_types import (
    TERMINAL_KINDS,
    FailureKind,
    FallbackDecision,
    NextAction,
    Tier,
)

NO_TOOLS_RETRY_KINDS = frozenset({FailureKind.TOOL_UNAVAILABLE, FailureKind.PROVIDER_UNAVAILABLE})
WEB_ONLY_KINDS = frozenset(
    {
        FailureKind.TOOL_UNAVAILABLE,
        FailureKind.PROVIDER_UNAVAILABLE,
        FailureKind.WEB_SEARCH_UNAVAILABLE,
    }
)


@dataclass(frozen=True)
class FallbackPolicy:
    max_attempts: int = 3
    allow_no_tools_retry: bool = True
    allow_web_only: bool = True


class FallbackManager:
    def decide(
        self,
        *,
        current_tier: Tier,
        failure_kind: FailureKind,
        first_failure_kind: FailureKind,
        attempt_index: int,
        policy: FallbackPolicy,
    ) -> FallbackDecision:
        """
        Pick the next step after ``current_tier`` failed with ``failure_kind``.

        ``first_failure_kind`` is the Tier 1 classification; it decides Tier 3
        eligibility so that a later Tier 2 failure cannot widen the cascade.
        """
        if failure_kind in TERMINAL_KINDS:
            return FallbackDecision(
                action=NextAction.RETURN_TERMINAL, next_tier=None, reason=failure_kind.value
            )

        if attempt_index + 1 >= policy.max_attempts:
            return FallbackDecision(action=NextAction.STOP, next_tier=None, reason="max_attempts")

        if current_tier == Tier.COMBINED:
            if failure_kind in NO_TOOLS_RETRY_KINDS and policy.allow_no_tools_retry:
                return FallbackDecision(
                    action=NextAction.RETRY_WITHOUT_TOOLS,
                    next_tier=Tier.NO_TOOLS,
                    reason=failure_kind.value,
                )
            if failure_kind in WEB_ONLY_KINDS and policy.allow_web_only:
                return FallbackDecision(
                    action=NextAction.WEB_ONLY, next_tier=Tier.WEB_ONLY, reason=failure_kind.value
                )

        if current_tier == Tier.NO_TOOLS:
            if first_failure_kind in WEB_ONLY_KINDS and policy.allow_web_only:
                return FallbackDecision(
                    action=NextAction.WEB_ONLY, next_tier=Tier.WEB_ONLY, reason=failure_kind.value
                )

        return FallbackDecision(action=NextAction.STOP, next_tier=None, reason=failure_kind.value)
