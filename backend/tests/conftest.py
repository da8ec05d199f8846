from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

TEST_ENV = {
    "ANTHROPIC_API_KEY": "test-anthropic-key",
    "SARVAM_API_KEY": "test-sarvam-key",
    "SEHAT_DISABLE_EXTERNAL_WEB": "true",
    "SEHAT_LOG_LEVEL": "WARNING",
}


class ScriptedEngine:
    """Stands in for the reasoning provider: replays events, then optionally raises."""

    def __init__(self, *events: Any, error: Exception | None = None) -> None:
        self.events = list(events)
        self.error = error
        self.turns: list[Any] = []
        self.api_key = "test-anthropic-key"

    async def stream(self, turn):
        self.turns.append(turn)
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error


@pytest.fixture
def backend_module(tmp_path, monkeypatch):
    monkeypatch.setenv("SEHAT_DB_PATH", str(tmp_path / "sehat-test.sqlite"))
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)

    if "main" in sys.modules:
        return importlib.reload(sys.modules["main"])
    return importlib.import_module("main")


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def install_engine(backend_module, monkeypatch) -> Callable[..., ScriptedEngine]:
    """Swap the orchestrator's engine for a scripted one; returns the engine for inspection."""

    def _install(*events: Any, error: Exception | None = None) -> ScriptedEngine:
        engine = ScriptedEngine(*events, error=error)
        monkeypatch.setattr(backend_module.container.orchestrator, "engine", engine)
        return engine

    return _install


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _make(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {user_id}"}

    return _make
