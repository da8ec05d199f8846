from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import logging
import os
import re
import sqlite3
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from fastapi import FastAPI, File, Form, Header, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from sehat_agent_core import (
    AnthropicReasoningEngine,
    ForbiddenError,
    HookRunner,
    Location,
    RateLimitError,
    SehatError,
    ToolExecutor,
    ToolRegistry,
    TriageOrchestrator,
    TriageTurn,
    UpstreamError,
    ValidationError,
    encode_sse,
)
from sehat_agent_core.hooks import ToolOutcome, context_requirements_hook, logging_hook
from sehat_agent_core.models import INPUT_MODES
from sehat_screening import filter_transcript, sanitize_history, sanitize_message, validate_language
from sehat_speech import (
    DuplexSynthesisRelay,
    SarvamClient,
    concat_wav,
    relay_in_order,
    segment,
    speech_code,
    strip_markdown,
)
from sehat_tools import FacilityLookup, SehatToolset, register_tools
from storage import (
    BackgroundWriter,
    RateLimiter,
    SessionStore,
    SQLiteTriageDB,
    TelemetryStore,
    TranscribeEvent,
    TTSEvent,
)
from storage.time_utils import epoch_ms

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _load_local_env_file(path: Path) -> None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not _ENV_KEY_RE.fullmatch(key):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _bootstrap_local_env() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    for candidate in (repo_root / ".env", repo_root / "backend/.env"):
        if candidate.exists():
            _load_local_env_file(candidate)


_bootstrap_local_env()

logging.basicConfig(
    level=os.getenv("SEHAT_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("sehat")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring non-integer %s=%r", name, raw)
        return default


_ANTHROPIC_API_BASE = os.getenv("ANTHROPIC_API_BASE_URL", "https://api.anthropic.com/v1").rstrip("/")
_ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5")
_ANTHROPIC_API_VERSION = os.getenv("ANTHROPIC_API_VERSION", "2023-06-01")
_THINKING_BUDGET = _env_int("SEHAT_THINKING_BUDGET", 10000)
_MAX_AUDIO_BYTES = _env_int("SEHAT_MAX_AUDIO_BYTES", 5 * 1024 * 1024)
_TRIAGE_RATE_LIMIT = _env_int("SEHAT_TRIAGE_RATE_LIMIT", 20)
_TRANSCRIBE_RATE_LIMIT = _env_int("SEHAT_TRANSCRIBE_RATE_LIMIT", 30)
_TTS_RATE_LIMIT = _env_int("SEHAT_TTS_RATE_LIMIT", 30)
_RATE_WINDOW_MS = 60_000
_MAX_TTS_CHARS = 1500


class TriageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Any = None
    language: Any = "en"
    conversation_history: Any = Field(default=None, alias="conversationHistory")
    session_id: str | None = Field(default=None, alias="sessionId")
    input_mode: str | None = Field(default="text", alias="inputMode")
    location: Any = None


class TTSRequest(BaseModel):
    text: Any = None
    language_code: str | None = None


class ProfilePayload(BaseModel):
    age: int | None = None
    gender: str | None = None
    pre_existing_conditions: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    blood_group: str | None = None
    state: str | None = None
    district: str | None = None


class SehatApp:
    """Process-wide state, constructed once at import and owned by the app."""

    def __init__(self) -> None:
        db_path = os.getenv(
            "SEHAT_DB_PATH",
            str((Path(__file__).resolve().parent / "sehat.sqlite")),
        )
        self.db = SQLiteTriageDB(db_path)
        self.sessions = SessionStore(self.db)
        self.rate_limiter = RateLimiter()
        self.telemetry = TelemetryStore()
        self.writer = BackgroundWriter()

        self.registry = ToolRegistry()
        self.toolset = SehatToolset(self.sessions, FacilityLookup())
        register_tools(self.registry, self.toolset)

        self.hooks = HookRunner()
        self.hooks.add_before(context_requirements_hook)
        self.hooks.add_after(logging_hook)
        self.hooks.add_after(self._after_tool_call)

        self.executor = ToolExecutor(registry=self.registry, hooks=self.hooks)
        self.engine = AnthropicReasoningEngine(
            executor=self.executor,
            api_key=os.getenv("ANTHROPIC_API_KEY"),
            model=_ANTHROPIC_MODEL,
            base_url=_ANTHROPIC_API_BASE,
            api_version=_ANTHROPIC_API_VERSION,
            thinking_budget=_THINKING_BUDGET,
        )
        self.orchestrator = TriageOrchestrator(
            engine=self.engine,
            executor=self.executor,
            telemetry=self.telemetry,
            writer=self.writer,
            session_store=self.sessions,
        )
        self.sarvam = SarvamClient(os.getenv("SARVAM_API_KEY"))

    def _after_tool_call(self, ctx, tool, payload: dict[str, Any], outcome: ToolOutcome) -> None:
        self.telemetry.record_tool_call(tool.name)

    def duplex_relay(self) -> DuplexSynthesisRelay:
        return DuplexSynthesisRelay(self.sarvam.api_key)


container = SehatApp()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    sweeper = asyncio.create_task(container.rate_limiter.run_periodic_sweep())
    try:
        yield
    finally:
        sweeper.cancel()
        await asyncio.gather(sweeper, return_exceptions=True)
        await container.writer.drain()


app = FastAPI(title="Sehat Backend", lifespan=lifespan)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SehatError)
async def _sehat_error_handler(_: Request, exc: SehatError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"error": f"{location}: {detail}" if location else detail})


_TRUSTED_USER_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:@-]{1,63}$")


def get_user_id(auth_header: str | None) -> str | None:
    if not auth_header:
        return None
    raw = auth_header.replace("Bearer", "", 1).strip()
    if not raw:
        return None
    # Bearer token is opaque; it is only used as a stable key.
    if len(raw) > 96:
        return f"token_{hashlib.sha256(raw.encode('utf-8')).hexdigest()[:24]}"
    return raw


def resolve_user_id(authorization: str | None, x_user_id: str | None) -> str | None:
    if x_user_id is not None:
        candidate = x_user_id.strip()
        if not _TRUSTED_USER_ID_RE.fullmatch(candidate):
            raise HTTPException(status_code=400, detail="Invalid X-User-Id")
        return candidate
    return get_user_id(authorization)


def require_user_id(authorization: str | None, x_user_id: str | None) -> str:
    user_id = resolve_user_id(authorization, x_user_id)
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing Authorization")
    return user_id


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request, channel: str, limit: int) -> None:
    decision = container.rate_limiter.admit(f"{channel}:{client_key(request)}", limit, _RATE_WINDOW_MS)
    if not decision.allowed:
        raise RateLimitError("Too many requests. Please wait a moment and try again.")


async def _read_upload_bytes(upload: UploadFile, *, max_bytes: int, too_large_detail: str) -> bytes:
    raw = await upload.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise HTTPException(status_code=413, detail=too_large_detail)
    if not raw:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    return raw


def _load_profile(user_id: str | None) -> dict[str, Any] | None:
    try:
        return container.sessions.get_profile(user_id)
    except (sqlite3.Error, ValueError):
        logger.warning("profile lookup failed for %s", user_id, exc_info=True)
        return None


def _required_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Text is required")
    return value


def _sse_response(events: AsyncIterator[Any]) -> StreamingResponse:
    return StreamingResponse(
        encode_sse(events),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"},
    )


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "anthropic_configured": bool(container.engine.api_key),
        "sarvam_configured": bool(container.sarvam.api_key),
    }


@app.post("/api/triage")
async def triage(
    payload: TriageRequest,
    request: Request,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    enforce_rate_limit(request, "triage", _TRIAGE_RATE_LIMIT)
    if not isinstance(payload.message, str) or not payload.message.strip():
        raise ValidationError("Message is required")
    sanitized = sanitize_message(payload.message)
    if not sanitized.text:
        raise ValidationError("Message is required")

    user_id = resolve_user_id(authorization, x_user_id)
    session_id = (payload.session_id or "").strip()[:64] or uuid.uuid4().hex
    owner = container.sessions.session_owner(session_id)
    if owner is not None and owner != user_id:
        raise ForbiddenError("Session belongs to another user")

    input_mode = payload.input_mode if payload.input_mode in INPUT_MODES else "text"
    turn = TriageTurn(
        message=sanitized.text,
        language=validate_language(payload.language),
        session_id=session_id,
        history=sanitize_history(payload.conversation_history),
        user_id=user_id,
        input_mode=input_mode,
        location=Location.from_payload(payload.location),
        profile=_load_profile(user_id),
        injection_flagged=sanitized.flagged,
    )
    return _sse_response(container.orchestrator.stream(turn))


@app.post("/api/transcribe")
async def transcribe(
    request: Request,
    audio: UploadFile | None = File(default=None),
    language: str | None = Form(default=None),
):
    enforce_rate_limit(request, "transcribe", _TRANSCRIBE_RATE_LIMIT)
    if audio is None:
        raise ValidationError("Audio file is required")
    container.sarvam.require_key()
    audio_bytes = await _read_upload_bytes(
        audio,
        max_bytes=_MAX_AUDIO_BYTES,
        too_large_detail=f"Audio file exceeds {_MAX_AUDIO_BYTES // (1024 * 1024)}MB limit.",
    )

    started = epoch_ms()
    language_hint = (language or "").strip() or None
    try:
        transcription = await container.sarvam.transcribe(
            audio_bytes,
            filename=(audio.filename or "").strip() or "recording.webm",
            content_type=(audio.content_type or "").strip() or "audio/webm",
            language_code=language_hint,
        )
    except UpstreamError:
        container.telemetry.record_transcribe(
            TranscribeEvent(
                timestamp=epoch_ms(),
                language=language_hint or "unknown",
                latency_ms=epoch_ms() - started,
                success=False,
            )
        )
        raise

    filtered = await asyncio.to_thread(filter_transcript, transcription["transcript"], len(audio_bytes))
    if filtered.rejected:
        logger.info("discarded transcript (%s) from %d byte upload", filtered.reason, len(audio_bytes))
    detected_language = str(transcription["language_code"])
    container.telemetry.record_transcribe(
        TranscribeEvent(
            timestamp=epoch_ms(),
            language=detected_language,
            latency_ms=epoch_ms() - started,
            success=True,
            filtered=filtered.rejected,
        )
    )
    return {"text": filtered.text, "language": detected_language, "confidence": filtered.confidence}


async def _tts_chunk_events(text: str, language_code: str) -> AsyncIterator[dict[str, Any]]:
    started = epoch_ms()
    chunks = segment(strip_markdown(text))
    delivered = 0

    async def synthesize(chunk: str) -> str:
        return await container.sarvam.synthesize(chunk, language_code)

    async for event in relay_in_order(chunks, synthesize):
        if event["type"] == "audio":
            delivered += 1
        yield event
    container.telemetry.record_tts(
        TTSEvent(
            timestamp=epoch_ms(),
            language=language_code,
            text_length=len(text),
            latency_ms=epoch_ms() - started,
            success=delivered > 0,
        )
    )


@app.post("/api/tts-stream")
async def tts_stream(payload: TTSRequest, request: Request):
    enforce_rate_limit(request, "tts", _TTS_RATE_LIMIT)
    text = _required_text(payload.text)
    container.sarvam.require_key()
    if not strip_markdown(text):
        raise ValidationError("No text after stripping markdown")
    return _sse_response(_tts_chunk_events(text, speech_code(payload.language_code)))


async def _duplex_events(relay: DuplexSynthesisRelay, text: str, language_code: str) -> AsyncIterator[dict[str, Any]]:
    started = epoch_ms()
    try:
        async for event in relay.stream(text, language_code):
            yield event
    finally:
        await relay.close()
        container.telemetry.record_tts(
            TTSEvent(
                timestamp=epoch_ms(),
                language=language_code,
                text_length=len(text),
                latency_ms=epoch_ms() - started,
                success=relay.frames_relayed > 0,
            )
        )


@app.post("/api/tts-ws")
async def tts_ws(payload: TTSRequest, request: Request):
    enforce_rate_limit(request, "tts", _TTS_RATE_LIMIT)
    text = _required_text(payload.text)
    container.sarvam.require_key()
    plain = strip_markdown(text)
    if not plain:
        raise ValidationError("No text after stripping markdown")
    relay = container.duplex_relay()
    return _sse_response(_duplex_events(relay, plain, speech_code(payload.language_code)))


@app.post("/api/tts")
async def tts(payload: TTSRequest, request: Request):
    enforce_rate_limit(request, "tts", _TTS_RATE_LIMIT)
    text = _required_text(payload.text)
    container.sarvam.require_key()
    language_code = speech_code(payload.language_code)
    chunks = segment(strip_markdown(text)[:_MAX_TTS_CHARS])
    if not chunks:
        raise ValidationError("No text after stripping markdown")

    started = epoch_ms()
    wav_parts: list[bytes] = []
    async for event in relay_in_order(chunks, lambda chunk: container.sarvam.synthesize(chunk, language_code)):
        if event["type"] != "audio":
            continue
        try:
            wav_parts.append(base64.b64decode(event["audio"], validate=True))
        except (binascii.Error, ValueError):
            logger.warning("discarding undecodable tts chunk %d", event["index"])
    container.telemetry.record_tts(
        TTSEvent(
            timestamp=epoch_ms(),
            language=language_code,
            text_length=len(text),
            latency_ms=epoch_ms() - started,
            success=bool(wav_parts),
        )
    )
    if not wav_parts:
        raise UpstreamError("No audio returned from Sarvam")
    audio = concat_wav(wav_parts)
    return Response(
        content=audio,
        media_type="audio/wav",
        headers={"Cache-Control": "public, max-age=3600"},
    )


@app.get("/api/analytics")
def analytics() -> dict[str, Any]:
    return container.telemetry.metrics()


@app.get("/api/profile")
def get_profile(
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = require_user_id(authorization, x_user_id)
    return {"profile": container.sessions.get_profile(user_id)}


@app.post("/api/profile")
def upsert_profile(
    payload: ProfilePayload,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = require_user_id(authorization, x_user_id)
    profile = payload.model_dump(exclude_none=True)
    container.sessions.upsert_profile(user_id, profile)
    return {"profile": profile}


@app.get("/api/sessions")
def list_sessions(
    limit: int = 20,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = require_user_id(authorization, x_user_id)
    return {"sessions": container.sessions.recent_sessions(user_id, limit=max(1, min(limit, 50)))}


@app.get("/api/sessions/{session_id}")
def get_session(
    session_id: str,
    authorization: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
):
    user_id = require_user_id(authorization, x_user_id)
    if container.sessions.session_owner(session_id) != user_id:
        raise HTTPException(status_code=404, detail="Session not found")
    stored = container.sessions.get_result(session_id) or {}
    return {
        "session_id": session_id,
        "messages": container.sessions.session_messages(session_id),
        "result": stored.get("result"),
        "thinking_content": stored.get("thinking_content"),
    }
