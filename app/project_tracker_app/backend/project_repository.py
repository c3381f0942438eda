from __future__ import annotations

from datetime import date
from functools import lru_cache
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

import pandas as pd

from project_tracker_app.core.config import AppConfig
from project_tracker_app.core.contracts import NewProjectRecord, ProjectRecord
from project_tracker_app.core.errors import SchemaBootstrapRequiredError, StoreFault
from project_tracker_app.core.project_status import ProjectStatus
from project_tracker_app.core.query_spec import ProjectQuerySpec
from project_tracker_app.infrastructure.db import (
    DataConnectionError,
    DataExecutionError,
    DataQueryError,
    SQLiteClient,
)

LOGGER = logging.getLogger(__name__)

PROJECTS_TABLE = "projects"
SEARCH_COLUMNS = ["name", "clientName"]

_DATA_ERRORS = (DataConnectionError, DataQueryError, DataExecutionError)
T = TypeVar("T")


class ProjectRepository:
    """SQLite-backed project store. Soft-deleted rows are filtered in every statement."""

    def __init__(self, config: AppConfig, client: SQLiteClient | None = None) -> None:
        self.config = config
        self.client = client or SQLiteClient(config)

    @staticmethod
    @lru_cache(maxsize=64)
    def _read_sql_file(path_str: str) -> str:
        path = Path(path_str)
        if not path.exists():
            raise FileNotFoundError(f"SQL file not found: {path}")
        return path.read_text(encoding="utf-8")

    def _sql(self, relative_path: str, **format_args: Any) -> str:
        sql_root = Path(__file__).resolve().parents[1] / "sql"
        sql_path = (sql_root / relative_path).resolve()
        template = self._read_sql_file(str(sql_path))
        return template.format(**format_args) if format_args else template

    def _query_file(self, relative_path: str, *, params: tuple | None = None, **format_args: Any) -> pd.DataFrame:
        statement = self._sql(relative_path, **format_args)
        return self.client.query(statement, params)

    def _execute_file(self, relative_path: str, *, params: tuple | None = None, **format_args: Any):
        statement = self._sql(relative_path, **format_args)
        return self.client.execute(statement, params)

    @staticmethod
    def _guard(operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except _DATA_ERRORS as exc:
            LOGGER.error(
                "Project store operation failed. operation=%s error=%s",
                operation,
                exc.__class__.__name__,
                extra={"event": "project_store_fault", "operation": operation},
            )
            raise StoreFault(operation, reason=str(exc)) from exc

    @staticmethod
    def _parse_date(value: Any) -> date | None:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        text = str(value).strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError as exc:
            raise DataQueryError(f"Stored date {text!r} is not an ISO calendar date.") from exc

    @classmethod
    def _row_to_record(cls, row: dict[str, Any]) -> ProjectRecord:
        status = ProjectStatus.parse(row.get("status"))
        if status is None:
            raise DataQueryError(f"Stored project {row.get('id')} has unknown status {row.get('status')!r}.")
        start_date = cls._parse_date(row.get("startDate"))
        if start_date is None:
            raise DataQueryError(f"Stored project {row.get('id')} has no startDate.")
        return ProjectRecord(
            project_id=int(row["id"]),
            name=str(row.get("name") or ""),
            client_name=str(row.get("clientName") or ""),
            status=status,
            start_date=start_date,
            end_date=cls._parse_date(row.get("endDate")),
            created_at=str(row.get("createdAt") or ""),
            updated_at=str(row.get("updatedAt") or ""),
        )

    @classmethod
    def _frame_to_records(cls, frame: pd.DataFrame) -> list[ProjectRecord]:
        if frame.empty:
            return []
        frame = frame.astype(object).where(frame.notna(), None)
        return [cls._row_to_record(row) for row in frame.to_dict(orient="records")]

    @staticmethod
    def _filter_contains_any(df: pd.DataFrame, needle: str | None, columns: list[str]) -> pd.DataFrame:
        cleaned = (needle or "").strip().casefold()
        if df.empty or not cleaned:
            return df
        mask = pd.Series(False, index=df.index)
        for column in columns:
            if column in df.columns:
                mask = mask | df[column].astype(str).str.casefold().str.contains(cleaned, regex=False, na=False)
        return df[mask].copy()

    def ensure_runtime_tables(self) -> None:
        try:
            found = self._query_file("projects/select_projects_table.sql", params=(PROJECTS_TABLE,))
        except _DATA_ERRORS as exc:
            raise SchemaBootstrapRequiredError(f"Project store is not reachable: {exc}") from exc
        if found.empty:
            raise SchemaBootstrapRequiredError(
                f"Required table '{PROJECTS_TABLE}' is missing. Run setup/local_db/init_local_db.py."
            )

    def insert(self, record: NewProjectRecord) -> int:
        result = self._guard(
            "insert",
            lambda: self._execute_file(
                "projects/insert_project.sql",
                params=(
                    record.name,
                    record.client_name,
                    record.status,
                    record.start_date,
                    record.end_date,
                    record.created_at,
                    record.updated_at,
                ),
                projects_table=PROJECTS_TABLE,
            ),
        )
        if result.lastrowid is None:
            raise StoreFault("insert", reason="Insert did not return a generated id.")
        return int(result.lastrowid)

    def get_visible(self, project_id: int) -> ProjectRecord | None:
        frame = self._guard(
            "get",
            lambda: self._query_file(
                "projects/select_visible_project_by_id.sql",
                params=(int(project_id),),
                projects_table=PROJECTS_TABLE,
            ),
        )
        records = self._guard("get", lambda: self._frame_to_records(frame))
        return records[0] if records else None

    def query(self, spec: ProjectQuerySpec) -> list[ProjectRecord]:
        params: list[Any] = []
        where_parts = ["deletedAt IS NULL"]
        if spec.status is not None:
            where_parts.append("status = ?")
            params.append(spec.status)

        frame = self._guard(
            "list",
            lambda: self._query_file(
                "projects/list_visible_projects.sql",
                params=tuple(params),
                projects_table=PROJECTS_TABLE,
                where_clause=" AND ".join(where_parts),
                order_column=spec.sort_by,
                order_direction="DESC" if spec.descending else "ASC",
            ),
        )
        # Boolean masking keeps the store's ORDER BY intact.
        frame = self._filter_contains_any(frame, spec.search, SEARCH_COLUMNS)
        return self._guard("list", lambda: self._frame_to_records(frame))

    def update_status_if(
        self,
        project_id: int,
        *,
        expected_status: ProjectStatus,
        expected_updated_at: str,
        new_status: ProjectStatus,
        updated_at: str,
    ) -> bool:
        result = self._guard(
            "update_status",
            lambda: self._execute_file(
                "projects/update_project_status_if_current.sql",
                params=(new_status, updated_at, int(project_id), expected_status, expected_updated_at),
                projects_table=PROJECTS_TABLE,
            ),
        )
        return result.rowcount > 0

    def soft_delete(self, project_id: int, *, deleted_at: str) -> bool:
        result = self._guard(
            "soft_delete",
            lambda: self._execute_file(
                "projects/soft_delete_project.sql",
                params=(deleted_at, deleted_at, int(project_id)),
                projects_table=PROJECTS_TABLE,
            ),
        )
        return result.rowcount > 0

    def close(self) -> None:
        self.client.close()
