from __future__ import annotations

import json
from typing import Any, Dict, List


def parse_sse_events(payload_text: str) -> List[Dict[str, Any]]:
    """Decode ``data:`` frames; ``[DONE]`` comes back as ``{"type": "[DONE]"}``."""
    events: List[Dict[str, Any]] = []
    for raw_line in payload_text.splitlines():
        line = raw_line.strip("\r")
        if not line.startswith("data: "):
            continue
        data = line[6:]
        if data == "[DONE]":
            events.append({"type": "[DONE]"})
            continue
        events.append(json.loads(data))
    return events


def event_types(payload_text: str) -> List[str]:
    return [event.get("type") for event in parse_sse_events(payload_text)]
