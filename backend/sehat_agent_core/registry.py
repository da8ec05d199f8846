from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from .models import ToolContext

ToolHandler = Callable[[ToolContext, dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass
class ToolDefinition:
    name: str
    description: str
    handler: ToolHandler
    input_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    requires_identity: bool = False

    def schema(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "input_schema": self.input_schema}


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._aliases: dict[str, str] = {}

    def register(self, tool: ToolDefinition) -> None:
        self._tools[tool.name] = tool

    def add_alias(self, alias: str, target: str) -> None:
        self._aliases[alias] = target

    def resolve(self, name: str) -> ToolDefinition:
        canonical = self._aliases.get(name, name)
        tool = self._tools.get(canonical)
        if not tool:
            raise KeyError(f"Tool not found: {name}")
        return tool

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._aliases.get(name, name) in self._tools

    def list_names(self) -> list[str]:
        return sorted(self._tools.keys())

    def schemas(self) -> list[dict[str, Any]]:
        return [self._tools[name].schema() for name in self.list_names()]
