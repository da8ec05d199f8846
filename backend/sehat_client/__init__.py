from .reducer import (
    ACTION_HANDLERS,
    EVENT_HANDLERS,
    ClientEmergency,
    ConversationState,
    Message,
    Reset,
    SetLanguage,
    StreamEnd,
    StreamStart,
    ToolStep,
    UserMessage,
    reduce,
)
from .stream import TriageStreamClient, parse_sse_payload
from .voice_phase import PHASES, VoicePhaseMachine

__all__ = [
    "ACTION_HANDLERS",
    "EVENT_HANDLERS",
    "PHASES",
    "ClientEmergency",
    "ConversationState",
    "Message",
    "Reset",
    "SetLanguage",
    "StreamEnd",
    "StreamStart",
    "ToolStep",
    "TriageStreamClient",
    "UserMessage",
    "VoicePhaseMachine",
    "parse_sse_payload",
    "reduce",
]
