from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from project_tracker_app.core.project_status import ProjectStatus
from project_tracker_app.core.query_spec import ProjectQuerySpec


@dataclass(frozen=True)
class NewProjectRecord:
    name: str
    client_name: str
    status: ProjectStatus
    start_date: date
    end_date: date | None
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class ProjectRecord:
    project_id: int
    name: str
    client_name: str
    status: ProjectStatus
    start_date: date
    end_date: date | None
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.project_id,
            "name": self.name,
            "clientName": self.client_name,
            "status": self.status.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class ProjectStore(Protocol):
    """
    Persistence contract the project service depends on.

    Every read excludes soft-deleted rows. ``update_status_if`` is a
    compare-and-swap: it only writes when the row is still visible and still
    carries ``expected_status`` and ``expected_updated_at``.
    """

    def ensure_runtime_tables(self) -> None:
        ...

    def insert(self, record: NewProjectRecord) -> int:
        ...

    def get_visible(self, project_id: int) -> ProjectRecord | None:
        ...

    def query(self, spec: ProjectQuerySpec) -> list[ProjectRecord]:
        ...

    def update_status_if(
        self,
        project_id: int,
        *,
        expected_status: ProjectStatus,
        expected_updated_at: str,
        new_status: ProjectStatus,
        updated_at: str,
    ) -> bool:
        ...

    def soft_delete(self, project_id: int, *, deleted_at: str) -> bool:
        ...
