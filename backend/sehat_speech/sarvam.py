from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from sehat_agent_core.errors import ConfigurationError, UpstreamError
from sehat_agent_core.reasoning import provider_error_message

logger = logging.getLogger(__name__)

SARVAM_TTS_URL = "https://api.sarvam.ai/text-to-speech"
SARVAM_STT_URL = "https://api.sarvam.ai/speech-to-text"
SARVAM_TTS_WS_URL = "wss://api.sarvam.ai/text-to-speech/ws"

TTS_MODEL = "bulbul:v3"
TTS_SPEAKER = "simran"
STT_MODEL = "saarika:v2"
DEFAULT_LANGUAGE_CODE = "en-IN"

SPEECH_CODES: dict[str, str] = {
    "en": "en-IN",
    "hi": "hi-IN",
    "ta": "ta-IN",
    "te": "te-IN",
    "mr": "mr-IN",
    "kn": "kn-IN",
    "bn": "bn-IN",
}


def speech_code(language: str | None) -> str:
    """Map ``hi`` to ``hi-IN``; codes that already carry a region pass through."""
    if not language:
        return DEFAULT_LANGUAGE_CODE
    if "-" in language:
        return language
    return SPEECH_CODES.get(language, DEFAULT_LANGUAGE_CODE)


class SarvamClient:
    """REST speech-to-text and text-to-speech calls against Sarvam AI."""

    def __init__(
        self,
        api_key: str | None,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        tts_url: str = SARVAM_TTS_URL,
        stt_url: str = SARVAM_STT_URL,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.tts_url = tts_url
        self.stt_url = stt_url
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(60.0, connect=10.0))
        )

    def require_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("Sarvam API key not configured")
        return self.api_key

    async def synthesize(self, text: str, language_code: str, *, client: httpx.AsyncClient | None = None) -> str:
        """Return base64 WAV audio for one chunk of text."""
        body = {
            "text": text,
            "target_language_code": language_code,
            "speaker": TTS_SPEAKER,
            "model": TTS_MODEL,
        }
        headers = {"API-Subscription-Key": self.require_key(), "Content-Type": "application/json"}
        if client is None:
            async with self._client_factory() as owned:
                response = await self._post(owned, self.tts_url, headers=headers, json=body)
        else:
            response = await self._post(client, self.tts_url, headers=headers, json=body)

        if response.status_code >= 400:
            raise UpstreamError(
                f"Sarvam TTS failed: {response.status_code}",
                upstream_status=response.status_code,
            )
        audios = _json_or_empty(response).get("audios")
        if not isinstance(audios, list) or not audios or not audios[0]:
            raise UpstreamError("No audio returned from Sarvam")
        return str(audios[0])

    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str = "recording.webm",
        content_type: str = "audio/webm",
        language_code: str | None = None,
    ) -> dict[str, Any]:
        headers = {"API-Subscription-Key": self.require_key()}
        files = {"file": (filename, audio, content_type)}
        data = {"model": STT_MODEL, "language_code": language_code or "unknown"}
        async with self._client_factory() as client:
            response = await self._post(client, self.stt_url, headers=headers, files=files, data=data)
        if response.status_code >= 400:
            logger.warning("sarvam stt error %s: %s", response.status_code, provider_error_message(response))
            raise UpstreamError(
                f"Transcription failed: {response.status_code}",
                upstream_status=response.status_code,
            )
        payload = _json_or_empty(response)
        return {
            "transcript": str(payload.get("transcript") or ""),
            "language_code": payload.get("language_code") or language_code or "unknown",
        }

    async def _post(self, client: httpx.AsyncClient, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await client.post(url, **kwargs)
        except httpx.TimeoutException as exc:
            raise UpstreamError("Sarvam request timed out", retryable=True) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Sarvam request failed: {exc}", retryable=True) from exc


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise UpstreamError("Malformed response from Sarvam") from exc
    return payload if isinstance(payload, dict) else {}
