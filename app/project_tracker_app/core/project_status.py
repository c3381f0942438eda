"""
Project lifecycle statuses and the transition policy between them.
"""

from __future__ import annotations

from enum import Enum


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, raw: object) -> "ProjectStatus | None":
        """Return the member for ``raw`` or ``None`` when it is not a known status."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip())
        except ValueError:
            return None


# Directed, no self-loops, completed is terminal.
STATUS_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.ACTIVE: frozenset({ProjectStatus.ON_HOLD, ProjectStatus.COMPLETED}),
    ProjectStatus.ON_HOLD: frozenset({ProjectStatus.ACTIVE, ProjectStatus.COMPLETED}),
    ProjectStatus.COMPLETED: frozenset(),
}


def allowed_targets(current: ProjectStatus) -> tuple[ProjectStatus, ...]:
    return tuple(sorted(STATUS_TRANSITIONS.get(current, frozenset()), key=lambda item: item.value))


def is_allowed(current: ProjectStatus, requested: ProjectStatus) -> bool:
    return requested in STATUS_TRANSITIONS.get(current, frozenset())
