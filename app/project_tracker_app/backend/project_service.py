"""
Project domain service.

Owns every business rule for projects: input validation, the status
transition policy, soft-delete visibility and the list query contract. The
store is injected; opening and closing it belongs to process bootstrap.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
import logging
import re
from typing import Any, Callable, Mapping

from project_tracker_app.core.contracts import NewProjectRecord, ProjectRecord, ProjectStore
from project_tracker_app.core.defaults import DEFAULT_STATUS_UPDATE_ATTEMPTS
from project_tracker_app.core.errors import (
    ProjectConflictError,
    ProjectNotFoundError,
    ProjectValidationError,
)
from project_tracker_app.core.project_status import ProjectStatus, allowed_targets, is_allowed
from project_tracker_app.core.query_spec import ProjectQuerySpec
from project_tracker_app.core.util import clean_text

LOGGER = logging.getLogger(__name__)

REQUIRED_CREATE_FIELDS = ("name", "clientName", "status", "startDate")
_PROJECT_ID_PATTERN = re.compile(r"^\d+$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ].*)?$")
# SQLite INTEGER is a signed 64-bit value.
MAX_PROJECT_ID = 2**63 - 1


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_project_id(raw: Any) -> int:
    """Parse an external identifier, rejecting anything that is not a positive integer."""
    if isinstance(raw, bool):
        raise ProjectValidationError("Valid project ID is required", field="id")
    if isinstance(raw, int):
        value = raw
    else:
        text = clean_text(raw)
        if not _PROJECT_ID_PATTERN.match(text):
            raise ProjectValidationError("Valid project ID is required", field="id")
        value = int(text)
    if value <= 0:
        raise ProjectValidationError("Valid project ID is required", field="id")
    if value > MAX_PROJECT_ID:
        raise ProjectNotFoundError(value)
    return value


def _status_choices_text() -> str:
    values = ProjectStatus.values()
    return f"{', '.join(values[:-1])}, or {values[-1]}"


def _parse_status(raw: Any) -> ProjectStatus:
    status = ProjectStatus.parse(raw)
    if status is None:
        raise ProjectValidationError(
            f"Invalid status. Must be: {_status_choices_text()}",
            field="status",
            details={"value": None if raw is None else str(raw)},
        )
    return status


def _parse_date(raw: Any, *, field: str) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = clean_text(raw)
    try:
        if not _DATE_PATTERN.match(text):
            raise ValueError(text)
        # Plain dates and full ISO timestamps; only the calendar date is kept.
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ProjectValidationError(
            f"{field} must be a calendar date (YYYY-MM-DD)",
            field=field,
            details={"value": text},
        ) from exc


class ProjectService:
    def __init__(
        self,
        store: ProjectStore,
        *,
        clock: Callable[[], datetime] | None = None,
        status_update_attempts: int = DEFAULT_STATUS_UPDATE_ATTEMPTS,
    ) -> None:
        self.store = store
        self._clock = clock or _utc_now
        self._status_update_attempts = max(1, int(status_update_attempts))

    def _timestamp(self) -> str:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc).isoformat(timespec="microseconds")

    def _load_visible(self, project_id: int) -> ProjectRecord:
        record = self.store.get_visible(project_id)
        if record is None:
            raise ProjectNotFoundError(project_id)
        return record

    def create(self, payload: Mapping[str, Any]) -> ProjectRecord:
        values = dict(payload or {})
        missing = [field for field in REQUIRED_CREATE_FIELDS if not clean_text(values.get(field))]
        if missing:
            raise ProjectValidationError(
                f"Missing required fields: {', '.join(missing)}",
                details={"missing": missing},
            )
        for field in ("name", "clientName"):
            if not isinstance(values.get(field), str):
                raise ProjectValidationError(f"{field} must be text", field=field)

        status = _parse_status(values.get("status"))
        start_date = _parse_date(values.get("startDate"), field="startDate")
        end_date = None
        if clean_text(values.get("endDate")):
            end_date = _parse_date(values.get("endDate"), field="endDate")
            if end_date < start_date:
                raise ProjectValidationError(
                    "endDate must be greater than or equal to startDate",
                    field="endDate",
                    details={"startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
                )

        now = self._timestamp()
        project_id = self.store.insert(
            NewProjectRecord(
                name=clean_text(values["name"]),
                client_name=clean_text(values["clientName"]),
                status=status,
                start_date=start_date,
                end_date=end_date,
                created_at=now,
                updated_at=now,
            )
        )
        created = self._load_visible(project_id)
        LOGGER.info(
            "Project created. id=%s status=%s",
            created.project_id,
            created.status.value,
            extra={"event": "project_created", "project_id": created.project_id},
        )
        return created

    def list(self, query: ProjectQuerySpec | Mapping[str, Any] | None = None) -> list[ProjectRecord]:
        spec = query if isinstance(query, ProjectQuerySpec) else ProjectQuerySpec.from_params(query)
        return list(self.store.query(spec))

    def get_by_id(self, project_id: Any) -> ProjectRecord:
        return self._load_visible(parse_project_id(project_id))

    def update_status(self, project_id: Any, requested_status: Any) -> ProjectRecord:
        """
        Move a project to ``requested_status``.

        Same-status requests return the stored entity untouched: no write and
        no ``updatedAt`` bump. Legal transitions are written with a
        compare-and-swap on the status and ``updatedAt`` that were read; on a
        lost race the request is re-evaluated against the fresh row.
        """
        project_id = parse_project_id(project_id)
        if not clean_text(requested_status):
            raise ProjectValidationError("Status is required", field="status")
        requested = _parse_status(requested_status)

        for attempt in range(1, self._status_update_attempts + 1):
            current = self._load_visible(project_id)
            if current.status == requested:
                return current
            if not is_allowed(current.status, requested):
                raise ProjectValidationError(
                    f"Invalid status transition from {current.status.value} to {requested.value}",
                    field="status",
                    details={
                        "current_status": current.status.value,
                        "requested_status": requested.value,
                        "allowed_transitions": [item.value for item in allowed_targets(current.status)],
                    },
                )
            written = self.store.update_status_if(
                project_id,
                expected_status=current.status,
                expected_updated_at=current.updated_at,
                new_status=requested,
                updated_at=self._timestamp(),
            )
            if written:
                updated = self._load_visible(project_id)
                LOGGER.info(
                    "Project status updated. id=%s from=%s to=%s",
                    project_id,
                    current.status.value,
                    requested.value,
                    extra={
                        "event": "project_status_updated",
                        "project_id": project_id,
                        "from_status": current.status.value,
                        "to_status": requested.value,
                    },
                )
                return updated
            LOGGER.warning(
                "Project status write lost a concurrent update. id=%s attempt=%s",
                project_id,
                attempt,
                extra={"event": "project_status_conflict", "project_id": project_id, "attempt": attempt},
            )
        raise ProjectConflictError(project_id, self._status_update_attempts)

    def soft_delete(self, project_id: Any) -> None:
        project_id = parse_project_id(project_id)
        if not self.store.soft_delete(project_id, deleted_at=self._timestamp()):
            raise ProjectNotFoundError(project_id)
        LOGGER.info(
            "Project deleted. id=%s",
            project_id,
            extra={"event": "project_deleted", "project_id": project_id},
        )
