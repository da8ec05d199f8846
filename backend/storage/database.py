from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class SQLiteTriageDB:
    def __init__(self, db_path: str) -> None:
        self._path = Path(db_path).expanduser().resolve()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    @property
    def path(self) -> str:
        return str(self._path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._path), timeout=30.0, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self.connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS profiles (
                  user_id TEXT PRIMARY KEY,
                  profile_json TEXT NOT NULL,
                  created_at TEXT NOT NULL,
                  updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS triage_sessions (
                  id TEXT PRIMARY KEY,
                  session_id TEXT UNIQUE NOT NULL,
                  user_id TEXT,
                  language TEXT NOT NULL,
                  severity TEXT CHECK (severity IN ('emergency', 'urgent', 'routine', 'self_care')),
                  confidence REAL CHECK (confidence >= 0 AND confidence <= 1),
                  symptoms_json TEXT NOT NULL DEFAULT '[]',
                  input_mode TEXT NOT NULL DEFAULT 'text'
                    CHECK (input_mode IN ('text', 'voice', 'voice_conversation')),
                  reasoning_summary TEXT,
                  is_emergency INTEGER NOT NULL DEFAULT 0,
                  is_medical_query INTEGER NOT NULL DEFAULT 1,
                  follow_up_count INTEGER NOT NULL DEFAULT 0,
                  latency_ms INTEGER,
                  had_error INTEGER NOT NULL DEFAULT 0,
                  created_at TEXT NOT NULL,
                  updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS conversation_messages (
                  id TEXT PRIMARY KEY,
                  session_id TEXT NOT NULL,
                  user_id TEXT,
                  role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
                  content TEXT NOT NULL,
                  language TEXT,
                  is_follow_up INTEGER NOT NULL DEFAULT 0,
                  created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS triage_results (
                  id TEXT PRIMARY KEY,
                  session_id TEXT UNIQUE NOT NULL,
                  user_id TEXT,
                  result_json TEXT NOT NULL,
                  thinking_content TEXT,
                  language TEXT,
                  created_at TEXT NOT NULL,
                  updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_triage_sessions_user_created
                  ON triage_sessions(user_id, created_at DESC);
                CREATE INDEX IF NOT EXISTS idx_conv_msg_session_created
                  ON conversation_messages(session_id, created_at);
                CREATE INDEX IF NOT EXISTS idx_triage_results_user
                  ON triage_results(user_id);
                """
            )
