from __future__ import annotations

# Environment and config defaults
DEFAULT_ENV_NAME = "dev"
DEFAULT_DEV_ENV_NAMES = ("dev", "development", "local")
DEFAULT_LOCAL_DB_PATH = "setup/local_db/projects_local.db"
DEFAULT_DB_TIMEOUT_SEC = 5.0
DEFAULT_STATUS_UPDATE_ATTEMPTS = 3
DEFAULT_SLOW_QUERY_MS = 750.0

# Web defaults
DEFAULT_DEV_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"
DEFAULT_APP_TITLE = "Project Tracker"
