from __future__ import annotations

import argparse
from pathlib import Path
import sqlite3

from project_tracker_app.core.config import AppConfig
from project_tracker_app.infrastructure.local_db_bootstrap import initialize_local_db
from project_tracker_app.infrastructure.logging import setup_app_logging


REQUIRED_SCHEMA: dict[str, tuple[str, ...]] = {
    "projects": (
        "id",
        "name",
        "clientName",
        "status",
        "startDate",
        "endDate",
        "createdAt",
        "updatedAt",
        "deletedAt",
    ),
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Initialize a local SQLite DB with the project schema and demo rows.")
    parser.add_argument(
        "--db-path",
        default="",
        help="Output SQLite database path. Defaults to PTRACKER_DB_PATH or the dev default.",
    )
    parser.add_argument(
        "--skip-seed",
        action="store_true",
        help="Skip running seed scripts.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete existing database file before creating.",
    )
    parser.add_argument(
        "--skip-verify",
        action="store_true",
        help="Skip post-bootstrap schema verification.",
    )
    return parser.parse_args()


def _table_columns(conn: sqlite3.Connection, table_name: str) -> set[str]:
    rows = conn.execute(f"PRAGMA table_info({table_name})").fetchall()
    return {str(row[1]).strip().lower() for row in rows if len(row) > 1 and str(row[1]).strip()}


def verify_required_schema(db_path: Path) -> list[str]:
    errors: list[str] = []
    conn = sqlite3.connect(str(db_path))
    try:
        for table_name, required_columns in REQUIRED_SCHEMA.items():
            present = _table_columns(conn, table_name)
            if not present:
                errors.append(f"missing table: {table_name}")
                continue
            missing = [column for column in required_columns if column.lower() not in present]
            if missing:
                errors.append(f"{table_name} missing columns: {', '.join(missing)}")
    finally:
        conn.close()
    return errors


def main() -> None:
    args = parse_args()
    setup_app_logging()
    db_path = Path(args.db_path).resolve() if args.db_path.strip() else Path(AppConfig.from_env().db_path)

    path = initialize_local_db(db_path, reset=args.reset, seed=not args.skip_seed)
    if not args.skip_verify:
        schema_errors = verify_required_schema(path)
        if schema_errors:
            raise RuntimeError(
                "Local schema validation failed. "
                "Run with --reset to rebuild the database. "
                f"Details: {'; '.join(schema_errors)}"
            )

    print(f"Local database ready: {path}")
    print(f"Seed scripts applied: {'no' if args.skip_seed else 'yes'}")


if __name__ == "__main__":
    main()
