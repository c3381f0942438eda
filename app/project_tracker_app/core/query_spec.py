from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from project_tracker_app.core.errors import ProjectValidationError
from project_tracker_app.core.project_status import ProjectStatus
from project_tracker_app.core.util import clean_text

SORT_FIELDS = ("createdAt", "startDate")
SORT_ORDERS = ("ASC", "DESC")
DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = "DESC"
STATUS_FILTER_ALL = "all"

_SORT_FIELD_ALIASES = {
    "createdat": "createdAt",
    "created_at": "createdAt",
    "startdate": "startDate",
    "start_date": "startDate",
}


@dataclass(frozen=True)
class ProjectQuerySpec:
    """
    Validated list query.

    Filters combine with AND and soft-deleted rows are always excluded by the
    store. Sorting uses a single key; rows that tie keep whatever order the
    store returns them in.
    """

    status: ProjectStatus | None = None
    search: str | None = None
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER

    def __post_init__(self) -> None:
        # sort_by is interpolated into ORDER BY, so only whitelisted columns may pass.
        if self.sort_by not in SORT_FIELDS:
            raise ProjectValidationError(
                f"Invalid sortBy field. Must be: {', '.join(SORT_FIELDS)}",
                field="sortBy",
            )
        if self.sort_order not in SORT_ORDERS:
            raise ProjectValidationError("Invalid sortOrder. Must be: ASC or DESC", field="sortOrder")

    @property
    def descending(self) -> bool:
        return self.sort_order == "DESC"

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None = None) -> "ProjectQuerySpec":
        values = dict(params or {})
        return cls(
            status=_normalize_status_filter(values.get("status")),
            search=clean_text(values.get("search")) or None,
            sort_by=_normalize_sort_by(values.get("sortBy")),
            sort_order=_normalize_sort_order(values.get("sortOrder")),
        )

    def to_params(self) -> dict[str, str]:
        params = {"sortBy": self.sort_by, "sortOrder": self.sort_order}
        if self.status is not None:
            params["status"] = self.status.value
        if self.search:
            params["search"] = self.search
        return params


def _normalize_status_filter(raw: Any) -> ProjectStatus | None:
    value = clean_text(raw)
    if not value or value.lower() == STATUS_FILTER_ALL:
        return None
    status = ProjectStatus.parse(value)
    if status is None:
        allowed_text = ", ".join(ProjectStatus.values())
        raise ProjectValidationError(f"Invalid status filter. Must be: {allowed_text}", field="status")
    return status


def _normalize_sort_by(raw: Any) -> str:
    value = clean_text(raw)
    if not value:
        return DEFAULT_SORT_BY
    normalized = _SORT_FIELD_ALIASES.get(value.lower())
    if normalized is None:
        raise ProjectValidationError(
            f"Invalid sortBy field. Must be: {', '.join(SORT_FIELDS)}",
            field="sortBy",
        )
    return normalized


def _normalize_sort_order(raw: Any) -> str:
    value = clean_text(raw).upper()
    if not value:
        return DEFAULT_SORT_ORDER
    if value not in SORT_ORDERS:
        raise ProjectValidationError("Invalid sortOrder. Must be: ASC or DESC", field="sortOrder")
    return value
