from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable

import websockets

from sehat_agent_core.errors import ConfigurationError

from .sarvam import SARVAM_TTS_WS_URL, TTS_MODEL, TTS_SPEAKER

logger = logging.getLogger(__name__)

MAX_SESSION_CHARS = 2500
SESSION_TIMEOUT_S = 30.0


def session_config(language_code: str) -> dict[str, Any]:
    return {
        "type": "config",
        "data": {
            "target_language_code": language_code,
            "speaker": TTS_SPEAKER,
            "pace": 1.0,
            "temperature": 0.6,
            "speech_sample_rate": 24000,
            "output_audio_codec": "mp3",
            "output_audio_bitrate": "128k",
            "min_buffer_size": 30,
            "max_chunk_length": 150,
            "enable_preprocessing": True,
        },
    }


class CompletionGuard:
    """First caller to ``claim`` wins; every later call returns False."""

    def __init__(self) -> None:
        self._claimed = False

    def claim(self) -> bool:
        if self._claimed:
            return False
        self._claimed = True
        return True

    @property
    def claimed(self) -> bool:
        return self._claimed


class DuplexSynthesisRelay:
    """Relays one text through a single streaming synthesis WebSocket session.

    Audio frames are forwarded as they arrive. The session ends on the provider's
    ``final`` event, an error frame, a closed socket, the wall-clock deadline or
    ``close()``; whichever comes first produces the only ``done`` event.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        url: str = SARVAM_TTS_WS_URL,
        timeout_s: float = SESSION_TIMEOUT_S,
        connect: Callable[..., Any] = websockets.connect,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.url = url
        self.timeout_s = timeout_s
        self._connect = connect
        self._ws: Any = None
        self._closed = False
        self.guard = CompletionGuard()
        self.frames_relayed = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        ws = self._ws
        if ws is not None:
            try:
                await ws.close()
            except Exception as exc:
                logger.debug("closing tts session raised: %s", exc)

    async def stream(self, text: str, language_code: str) -> AsyncIterator[dict[str, Any]]:
        if not self.api_key:
            raise ConfigurationError("Sarvam API key not configured")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_s
        session_url = f"{self.url}?model={TTS_MODEL}&send_completion_event=true"
        try:
            async with self._connect(session_url, additional_headers={"api-subscription-key": self.api_key}) as ws:
                self._ws = ws
                await ws.send(json.dumps(session_config(language_code)))
                await ws.send(json.dumps({"type": "text", "data": {"text": text[:MAX_SESSION_CHARS]}}))
                await ws.send(json.dumps({"type": "flush"}))

                while not self._closed:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        logger.warning("tts websocket timeout after %.0fs", self.timeout_s)
                        break
                    try:
                        raw = await asyncio.wait_for(ws.recv(), remaining)
                    except asyncio.TimeoutError:
                        logger.warning("tts websocket timeout after %.0fs", self.timeout_s)
                        break
                    except websockets.ConnectionClosed:
                        break

                    try:
                        message = json.loads(raw)
                    except (TypeError, ValueError):
                        continue
                    if not isinstance(message, dict):
                        continue
                    data = message.get("data") if isinstance(message.get("data"), dict) else {}
                    kind = message.get("type")

                    if kind == "audio" and data.get("audio"):
                        yield {"type": "audio", "index": self.frames_relayed, "audio": data["audio"], "format": "mp3"}
                        self.frames_relayed += 1
                    elif kind == "event" and data.get("event_type") == "final":
                        break
                    elif kind == "error":
                        logger.error("sarvam ws tts error: %s", data.get("message"))
                        if self.frames_relayed == 0:
                            yield {"type": "error", "message": data.get("message") or "TTS failed"}
                        break
        except (websockets.WebSocketException, OSError) as exc:
            logger.error("sarvam ws connection error: %s", exc)
            if self.frames_relayed == 0:
                yield {"type": "error", "message": "WebSocket connection failed"}
        finally:
            self._ws = None
            self._closed = True

        if self.guard.claim():
            yield {"type": "done", "totalChunks": self.frames_relayed}
