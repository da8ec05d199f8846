from __future__ import annotations

import json
import uuid
from typing import Any

from .database import SQLiteTriageDB
from .time_utils import to_iso, utc_now


def _json_dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class SessionStore:
    """Session, message and result records written after each triage exchange."""

    def __init__(self, db: SQLiteTriageDB) -> None:
        self._db = db

    def add_message(
        self,
        *,
        session_id: str,
        user_id: str | None,
        role: str,
        content: str,
        language: str | None = None,
        is_follow_up: bool = False,
    ) -> str:
        message_id = uuid.uuid4().hex
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO conversation_messages (
                  id, session_id, user_id, role, content, language, is_follow_up, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message_id,
                    session_id,
                    user_id,
                    role,
                    content,
                    language,
                    int(is_follow_up),
                    to_iso(utc_now()),
                ),
            )
        return message_id

    def upsert_session(
        self,
        *,
        session_id: str,
        user_id: str | None,
        language: str,
        severity: str | None,
        confidence: float | None,
        symptoms: list[str],
        input_mode: str,
        reasoning_summary: str | None,
        is_emergency: bool,
        is_medical_query: bool,
        follow_up_count: int,
        latency_ms: int,
        had_error: bool,
    ) -> None:
        now = to_iso(utc_now())
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO triage_sessions (
                  id, session_id, user_id, language, severity, confidence, symptoms_json,
                  input_mode, reasoning_summary, is_emergency, is_medical_query,
                  follow_up_count, latency_ms, had_error, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                  user_id = COALESCE(triage_sessions.user_id, excluded.user_id),
                  language = excluded.language,
                  severity = COALESCE(excluded.severity, triage_sessions.severity),
                  confidence = COALESCE(excluded.confidence, triage_sessions.confidence),
                  symptoms_json = CASE
                    WHEN excluded.severity IS NULL THEN triage_sessions.symptoms_json
                    ELSE excluded.symptoms_json
                  END,
                  input_mode = excluded.input_mode,
                  reasoning_summary = COALESCE(excluded.reasoning_summary, triage_sessions.reasoning_summary),
                  is_emergency = MAX(excluded.is_emergency, triage_sessions.is_emergency),
                  is_medical_query = excluded.is_medical_query,
                  follow_up_count = triage_sessions.follow_up_count + excluded.follow_up_count,
                  latency_ms = excluded.latency_ms,
                  had_error = excluded.had_error,
                  updated_at = excluded.updated_at
                """,
                (
                    uuid.uuid4().hex,
                    session_id,
                    user_id,
                    language,
                    severity,
                    confidence,
                    _json_dumps(symptoms),
                    input_mode,
                    reasoning_summary,
                    int(is_emergency),
                    int(is_medical_query),
                    follow_up_count,
                    latency_ms,
                    int(had_error),
                    now,
                    now,
                ),
            )

    def save_result(
        self,
        *,
        session_id: str,
        user_id: str | None,
        result: dict[str, Any],
        thinking_content: str,
        language: str,
    ) -> None:
        now = to_iso(utc_now())
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO triage_results (
                  id, session_id, user_id, result_json, thinking_content, language, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                  result_json = excluded.result_json,
                  thinking_content = excluded.thinking_content,
                  language = excluded.language,
                  updated_at = excluded.updated_at
                """,
                (
                    uuid.uuid4().hex,
                    session_id,
                    user_id,
                    _json_dumps(result),
                    thinking_content or None,
                    language,
                    now,
                    now,
                ),
            )

    def get_profile(self, user_id: str | None) -> dict[str, Any] | None:
        if not user_id:
            return None
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT profile_json FROM profiles WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return json.loads(row["profile_json"]) if row else None

    def upsert_profile(self, user_id: str, profile: dict[str, Any]) -> None:
        now = to_iso(utc_now())
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO profiles (user_id, profile_json, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                  profile_json = excluded.profile_json,
                  updated_at = excluded.updated_at
                """,
                (user_id, _json_dumps(profile), now, now),
            )

    def recent_sessions(self, user_id: str, *, limit: int = 10) -> list[dict[str, Any]]:
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT session_id, severity, symptoms_json, reasoning_summary, is_emergency, had_error, created_at
                FROM triage_sessions
                WHERE user_id = ? AND is_medical_query = 1
                ORDER BY created_at DESC
                LIMIT ?
                """,
                (user_id, max(1, limit)),
            ).fetchall()
        return [
            {
                "session_id": row["session_id"],
                "severity": row["severity"],
                "symptoms": json.loads(row["symptoms_json"]),
                "reasoning": row["reasoning_summary"],
                "is_emergency": bool(row["is_emergency"]),
                "had_error": bool(row["had_error"]),
                "date": row["created_at"],
            }
            for row in rows
        ]

    def session_messages(self, session_id: str) -> list[dict[str, Any]]:
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT role, content, language, is_follow_up, created_at
                FROM conversation_messages
                WHERE session_id = ?
                ORDER BY created_at, rowid
                """,
                (session_id,),
            ).fetchall()
        return [
            {
                "role": row["role"],
                "content": row["content"],
                "language": row["language"],
                "is_follow_up": bool(row["is_follow_up"]),
                "created_at": row["created_at"],
            }
            for row in rows
        ]

    def get_result(self, session_id: str) -> dict[str, Any] | None:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT result_json, thinking_content FROM triage_results WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        if not row:
            return None
        return {"result": json.loads(row["result_json"]), "thinking_content": row["thinking_content"]}

    def session_owner(self, session_id: str) -> str | None:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT user_id FROM triage_sessions WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        return row["user_id"] if row else None
