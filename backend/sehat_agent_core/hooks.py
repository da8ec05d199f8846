from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .models import ToolContext
from .registry import ToolDefinition

logger = logging.getLogger(__name__)

BeforeHook = Callable[[ToolContext, ToolDefinition, dict[str, Any]], "HookDecision"]
AfterHook = Callable[[ToolContext, ToolDefinition, dict[str, Any], "ToolOutcome"], None]


@dataclass(frozen=True)
class HookDecision:
    allowed: bool
    code: str = "ok"
    message: str = "allowed"


@dataclass(frozen=True)
class ToolOutcome:
    status: str
    result: dict[str, Any] | None
    latency_ms: int
    error_code: str | None = None


class HookRunner:
    def __init__(self) -> None:
        self._before_hooks: list[BeforeHook] = []
        self._after_hooks: list[AfterHook] = []

    def add_before(self, hook: BeforeHook) -> None:
        self._before_hooks.append(hook)

    def add_after(self, hook: AfterHook) -> None:
        self._after_hooks.append(hook)

    def run_before(self, ctx: ToolContext, tool: ToolDefinition, payload: dict[str, Any]) -> HookDecision:
        for hook in self._before_hooks:
            decision = hook(ctx, tool, payload)
            if not decision.allowed:
                return decision
        return HookDecision(allowed=True)

    def run_after(
        self,
        ctx: ToolContext,
        tool: ToolDefinition,
        payload: dict[str, Any],
        outcome: ToolOutcome,
    ) -> None:
        for hook in self._after_hooks:
            try:
                hook(ctx, tool, payload, outcome)
            except Exception:
                logger.exception("after-hook failed for tool %s", tool.name)


def context_requirements_hook(ctx: ToolContext, tool: ToolDefinition, payload: dict[str, Any]) -> HookDecision:
    if tool.requires_identity and not ctx.user_id:
        return HookDecision(False, "identity_required", "Anonymous user, no stored history is available.")
    if payload.get("target_user_id") and payload.get("target_user_id") != ctx.user_id:
        return HookDecision(False, "cross_user_block", "Cross-user target is blocked.")
    return HookDecision(allowed=True)


def logging_hook(ctx: ToolContext, tool: ToolDefinition, payload: dict[str, Any], outcome: ToolOutcome) -> None:
    logger.info(
        "tool %s finished status=%s latency_ms=%d session=%s",
        tool.name,
        outcome.status,
        outcome.latency_ms,
        ctx.session_id,
    )
