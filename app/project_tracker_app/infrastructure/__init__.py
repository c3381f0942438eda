"""Infrastructure adapters for storage and logging."""

from project_tracker_app.infrastructure.db import (
    DataConnectionError,
    DataExecutionError,
    DataQueryError,
    SQLiteClient,
)

__all__ = [
    "DataConnectionError",
    "DataExecutionError",
    "DataQueryError",
    "SQLiteClient",
]
