from __future__ import annotations

import logging
from pathlib import Path
import sqlite3
from typing import Iterable

from project_tracker_app.core.config import AppConfig
from project_tracker_app.core.env import (
    PTRACKER_DB_AUTO_INIT,
    PTRACKER_DB_RESET_ON_START,
    PTRACKER_DB_SEED,
    get_env_bool,
)

LOGGER = logging.getLogger(__name__)

SQL_ROOT = Path(__file__).resolve().parents[1] / "sql"


def _sql_files_from_dir(directory: Path) -> list[Path]:
    if not directory.exists():
        raise FileNotFoundError(f"SQL directory not found: {directory}")
    files = sorted(item for item in directory.iterdir() if item.is_file() and item.suffix.lower() == ".sql")
    if not files:
        raise FileNotFoundError(f"No SQL files found in: {directory}")
    return files


def _apply_sql_files(conn: sqlite3.Connection, files: Iterable[Path]) -> int:
    count = 0
    for sql_file in files:
        conn.executescript(sql_file.read_text(encoding="utf-8"))
        count += 1
    return count


def initialize_local_db(db_path: str | Path, *, reset: bool = False, seed: bool = False) -> Path:
    """Create (or recreate) the SQLite schema at ``db_path``. Returns the resolved path."""
    path = Path(db_path).resolve()
    if reset and path.exists():
        path.unlink()
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    try:
        schema_count = _apply_sql_files(conn, _sql_files_from_dir(SQL_ROOT / "schema"))
        seed_count = _apply_sql_files(conn, _sql_files_from_dir(SQL_ROOT / "seed")) if seed else 0
        conn.commit()
    finally:
        conn.close()

    LOGGER.info(
        "Local DB initialized. path=%s schema_files=%s seed_files=%s reset=%s",
        path,
        schema_count,
        seed_count,
        str(reset).lower(),
        extra={"event": "local_db_initialized", "db_path": str(path)},
    )
    return path


def ensure_local_db_ready(config: AppConfig) -> None:
    auto_init = get_env_bool(PTRACKER_DB_AUTO_INIT, default=True)
    if not auto_init:
        return

    db_path = Path(config.db_path).resolve()
    reset_on_start = get_env_bool(PTRACKER_DB_RESET_ON_START, default=False)
    if reset_on_start and not config.is_dev_env:
        raise RuntimeError(f"{PTRACKER_DB_RESET_ON_START}=true is allowed only for dev/local environments.")
    if db_path.exists() and not reset_on_start:
        return

    initialize_local_db(
        db_path,
        reset=reset_on_start,
        seed=get_env_bool(PTRACKER_DB_SEED, default=False),
    )
