"""
Project service error taxonomy.

Every failure leaving ``ProjectService`` is one of these types. The HTTP
layer maps ``code`` to a status deterministically.
"""

from __future__ import annotations

from typing import Any

ERROR_CODE_VALIDATION = "VALIDATION_ERROR"
ERROR_CODE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_CONFLICT = "CONFLICT"
ERROR_CODE_STORE_FAULT = "STORE_FAULT"


class SchemaBootstrapRequiredError(RuntimeError):
    """Raised when required runtime schema objects are missing or inaccessible."""


class ProjectServiceError(RuntimeError):
    code = "PROJECT_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.details = dict(details or {})


class ProjectValidationError(ProjectServiceError):
    """Malformed, missing or out-of-range input. The caller can fix and retry."""

    code = ERROR_CODE_VALIDATION

    def __init__(self, message: str, *, field: str | None = None, details: dict[str, Any] | None = None) -> None:
        merged = dict(details or {})
        if field:
            merged.setdefault("field", field)
        super().__init__(message, details=merged)
        self.field = field


class ProjectNotFoundError(ProjectServiceError):
    code = ERROR_CODE_NOT_FOUND

    def __init__(self, project_id: Any) -> None:
        super().__init__("Project not found", details={"project_id": str(project_id)})
        self.project_id = project_id


class ProjectConflictError(ProjectServiceError):
    """Raised when a conditional write keeps losing to concurrent writers."""

    code = ERROR_CODE_CONFLICT

    def __init__(self, project_id: Any, attempts: int) -> None:
        super().__init__(
            "Project was modified concurrently. Reload and try again.",
            details={"project_id": str(project_id), "attempts": int(attempts)},
        )
        self.project_id = project_id
        self.attempts = int(attempts)


class StoreFault(ProjectServiceError):
    """Persistence collaborator failure. Never retried by the service."""

    code = ERROR_CODE_STORE_FAULT

    def __init__(self, operation: str, *, reason: str = "") -> None:
        super().__init__(
            f"Project store failed during {operation}.",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
