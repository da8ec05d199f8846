from .errors import (
    ConfigurationError,
    ForbiddenError,
    RateLimitError,
    SehatError,
    StreamFailure,
    UpstreamError,
    ValidationError,
)
from .events import STREAM_EVENT_TYPES, TERMINAL_EVENT_TYPES, StreamEvent, TriageResult, encode_sse, parse_event
from .executor import ToolExecutor
from .hooks import HookDecision, HookRunner, ToolOutcome
from .models import Location, ToolContext, TriageTurn
from .orchestrator import TriageOrchestrator
from .reasoning import AnthropicReasoningEngine
from .registry import ToolDefinition, ToolRegistry

__all__ = [
    "STREAM_EVENT_TYPES",
    "TERMINAL_EVENT_TYPES",
    "AnthropicReasoningEngine",
    "ConfigurationError",
    "ForbiddenError",
    "HookDecision",
    "HookRunner",
    "Location",
    "RateLimitError",
    "SehatError",
    "StreamEvent",
    "StreamFailure",
    "ToolContext",
    "ToolDefinition",
    "ToolExecutor",
    "ToolOutcome",
    "ToolRegistry",
    "TriageOrchestrator",
    "TriageResult",
    "TriageTurn",
    "UpstreamError",
    "ValidationError",
    "encode_sse",
    "parse_event",
]
