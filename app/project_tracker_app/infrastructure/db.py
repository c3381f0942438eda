from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
import hashlib
import logging
from pathlib import Path
import re
import sqlite3
import time
from typing import Any, Iterable, Iterator

import pandas as pd

from project_tracker_app.core.config import AppConfig
from project_tracker_app.core.defaults import DEFAULT_SLOW_QUERY_MS
from project_tracker_app.core.env import (
    PTRACKER_SLOW_QUERY_MS,
    PTRACKER_SQL_TRACE_ENABLED,
    PTRACKER_SQL_TRACE_MAX_LEN,
    get_env_bool,
    get_env_float,
    get_env_int,
)

PERF_LOGGER = logging.getLogger("project_tracker_app.perf")
_REQUEST_PERF_CONTEXT: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "ptracker_request_perf",
    default=None,
)


def start_request_perf_context(
    *,
    request_id: str,
    method: str,
    path: str,
    slow_query_ms: float,
) -> contextvars.Token:
    return _REQUEST_PERF_CONTEXT.set(
        {
            "request_id": request_id,
            "method": method,
            "path": path,
            "slow_query_ms": float(slow_query_ms),
            "db_calls": 0,
            "db_errors": 0,
            "db_total_ms": 0.0,
            "db_max_ms": 0.0,
            "slow_queries": [],
        }
    )


def get_request_perf_context() -> dict[str, Any] | None:
    return _REQUEST_PERF_CONTEXT.get()


def clear_request_perf_context(token: contextvars.Token) -> None:
    _REQUEST_PERF_CONTEXT.reset(token)


class DataConnectionError(RuntimeError):
    """Raised when a database connection cannot be established."""


class DataQueryError(RuntimeError):
    """Raised when a query operation fails."""


class DataExecutionError(RuntimeError):
    """Raised when a non-query execution fails."""


@dataclass(frozen=True)
class ExecutionResult:
    rowcount: int
    lastrowid: int | None


class SQLiteClient:
    """Short-lived SQLite connections with per-request perf accounting."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._sql_trace_enabled = get_env_bool(PTRACKER_SQL_TRACE_ENABLED, default=False)
        self._sql_trace_max_len = get_env_int(PTRACKER_SQL_TRACE_MAX_LEN, default=180, min_value=80)
        self._slow_query_ms = get_env_float(PTRACKER_SLOW_QUERY_MS, default=DEFAULT_SLOW_QUERY_MS, min_value=1.0)

    @property
    def db_path(self) -> Path:
        return Path(self.config.db_path).resolve()

    @staticmethod
    def _is_connection_error(exc: BaseException) -> bool:
        message = str(exc).lower()
        signals = (
            "unable to open",
            "database is locked",
            "disk i/o",
            "readonly database",
            "not a database",
        )
        return any(token in message for token in signals)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        db_path = self.db_path
        if not db_path.exists():
            raise DataConnectionError(
                f"Local DB not found: {db_path}. Run `python setup/local_db/init_local_db.py` first."
            )
        try:
            conn = sqlite3.connect(str(db_path), timeout=float(self.config.db_timeout_sec))
        except sqlite3.Error as exc:
            raise DataConnectionError(f"Failed to connect to SQLite DB at {db_path}.") from exc
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _prepare(statement: str) -> str:
        normalized = str(statement or "")
        if normalized.startswith("\ufeff"):
            normalized = normalized.lstrip("\ufeff")
        return normalized

    @staticmethod
    def _prepare_params(params: Iterable[Any] | None) -> tuple[Any, ...]:
        if not params:
            return ()
        cleaned: list[Any] = []
        for value in params:
            if isinstance(value, Enum):
                cleaned.append(value.value)
            elif isinstance(value, (datetime, date)):
                cleaned.append(value.isoformat())
            else:
                cleaned.append(value)
        return tuple(cleaned)

    @staticmethod
    def _sql_preview(statement: str, max_len: int = 180) -> str:
        compact = re.sub(r"\s+", " ", str(statement or "")).strip()
        if len(compact) <= max_len:
            return compact
        return f"{compact[: max_len - 3]}..."

    def _record_query_perf(
        self,
        *,
        operation: str,
        statement: str,
        elapsed_ms: float,
        row_count: int | None = None,
        error: bool = False,
    ) -> None:
        statement_text = str(statement or "")
        sql_hash = hashlib.sha1(statement_text.encode("utf-8", errors="ignore")).hexdigest()[:12]
        preview = self._sql_preview(statement_text, max_len=self._sql_trace_max_len)

        request_ctx = get_request_perf_context()
        if request_ctx is not None:
            request_ctx["db_calls"] = int(request_ctx.get("db_calls", 0)) + 1
            request_ctx["db_total_ms"] = float(request_ctx.get("db_total_ms", 0.0)) + float(elapsed_ms)
            request_ctx["db_max_ms"] = max(float(request_ctx.get("db_max_ms", 0.0)), float(elapsed_ms))
            if error:
                request_ctx["db_errors"] = int(request_ctx.get("db_errors", 0)) + 1

            slow_threshold = float(request_ctx.get("slow_query_ms", self._slow_query_ms))
            if elapsed_ms >= slow_threshold:
                slow_queries = request_ctx.setdefault("slow_queries", [])
                if len(slow_queries) < 10:
                    slow_queries.append(
                        {
                            "operation": operation,
                            "elapsed_ms": round(float(elapsed_ms), 2),
                            "rows": int(row_count) if row_count is not None else None,
                            "sql_hash": sql_hash,
                            "sql": preview,
                            "error": bool(error),
                        }
                    )

        should_log = self._sql_trace_enabled or elapsed_ms >= self._slow_query_ms or error
        if not should_log:
            return

        log_fn = PERF_LOGGER.warning if (elapsed_ms >= self._slow_query_ms or error) else PERF_LOGGER.info
        log_fn(
            "sql_perf op=%s ms=%.2f rows=%s error=%s hash=%s sql=%s",
            operation,
            float(elapsed_ms),
            "-" if row_count is None else int(row_count),
            str(bool(error)).lower(),
            sql_hash,
            preview,
        )

    def query(self, statement: str, params: Iterable[Any] | None = None) -> pd.DataFrame:
        prepared_statement = self._prepare(statement)
        prepared_params = self._prepare_params(params)
        started = time.perf_counter()
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(prepared_statement, prepared_params)
                rows = cursor.fetchall()
                cols = [desc[0] for desc in cursor.description] if cursor.description else []
                cursor.close()
        except DataConnectionError:
            self._record_query_perf(operation="query", statement=prepared_statement, elapsed_ms=0.0, error=True)
            raise
        except sqlite3.Error as exc:
            self._record_query_perf(
                operation="query",
                statement=prepared_statement,
                elapsed_ms=(time.perf_counter() - started) * 1000.0,
                error=True,
            )
            if self._is_connection_error(exc):
                raise DataConnectionError(f"SQLite connection failed: {exc}") from exc
            raise DataQueryError("Query execution failed.") from exc

        frame = pd.DataFrame(rows, columns=cols)
        self._record_query_perf(
            operation="query",
            statement=prepared_statement,
            elapsed_ms=(time.perf_counter() - started) * 1000.0,
            row_count=len(frame.index),
        )
        return frame

    def execute(self, statement: str, params: Iterable[Any] | None = None) -> ExecutionResult:
        prepared_statement = self._prepare(statement)
        prepared_params = self._prepare_params(params)
        started = time.perf_counter()
        try:
            with self._connection() as conn:
                cursor = conn.cursor()
                cursor.execute(prepared_statement, prepared_params)
                result = ExecutionResult(rowcount=int(cursor.rowcount), lastrowid=cursor.lastrowid)
                cursor.close()
                conn.commit()
        except DataConnectionError:
            self._record_query_perf(operation="execute", statement=prepared_statement, elapsed_ms=0.0, error=True)
            raise
        except sqlite3.Error as exc:
            self._record_query_perf(
                operation="execute",
                statement=prepared_statement,
                elapsed_ms=(time.perf_counter() - started) * 1000.0,
                error=True,
            )
            if self._is_connection_error(exc):
                raise DataConnectionError(f"SQLite connection failed: {exc}") from exc
            raise DataExecutionError("Statement execution failed.") from exc

        self._record_query_perf(
            operation="execute",
            statement=prepared_statement,
            elapsed_ms=(time.perf_counter() - started) * 1000.0,
            row_count=result.rowcount,
        )
        return result

    def close(self) -> None:
        # Connections are opened per call; nothing is held between statements.
        return None
