from __future__ import annotations

import logging
import time
from typing import Any

from .hooks import HookRunner, ToolOutcome
from .models import ToolContext
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Runs a registered tool by name. Every failure comes back as a result payload."""

    def __init__(self, *, registry: ToolRegistry, hooks: HookRunner) -> None:
        self.registry = registry
        self.hooks = hooks

    async def execute(self, name: str, payload: dict[str, Any] | None, ctx: ToolContext) -> dict[str, Any] | None:
        payload = dict(payload or {})
        try:
            tool = self.registry.resolve(name)
        except KeyError:
            logger.warning("unknown tool requested: %s", name)
            return {"error": f"Unknown tool: {name}", "found": False}

        started = time.monotonic()
        decision = self.hooks.run_before(ctx, tool, payload)
        if not decision.allowed:
            result = {"error": decision.message, "code": decision.code}
            self.hooks.run_after(ctx, tool, payload, ToolOutcome("blocked", result, 0, decision.code))
            return result

        try:
            result = await tool.handler(ctx, payload)
        except Exception as exc:
            logger.exception("tool %s raised", tool.name)
            result = {"error": f"Tool execution failed: {exc}"}
            outcome = ToolOutcome("failed", result, _elapsed_ms(started), "tool_exception")
        else:
            if result is not None and not isinstance(result, dict):
                result = {"value": result}
            outcome = ToolOutcome("succeeded", result, _elapsed_ms(started))

        self.hooks.run_after(ctx, tool, payload, outcome)
        return result


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
