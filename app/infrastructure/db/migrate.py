"""
Plain-SQL migrations.

    python -m app.infrastructure.db.migrate up
    python -m app.infrastructure.db.migrate status
    python -m app.infrastructure.db.migrate new add_payment_currency
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import psycopg

from app.logging import setup_logging
from app.settings import get_settings

logger = logging.getLogger("app.infrastructure.db.migrate")

MIGRATIONS_DIR = Path(
    os.environ.get(
        "MIGRATIONS_DIR", Path(__file__).resolve().parents[3] / "migrations"
    )
)
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


def list_migrations(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    if not directory.exists():
        raise FileNotFoundError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


def pending(all_paths: list[Path], applied: set[str]) -> list[Path]:
    return [p for p in all_paths if p.stem not in applied]


def applied_versions(conn: psycopg.Connection) -> set[str]:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version FROM schema_migrations ORDER BY version;")
        rows = cur.fetchall()
    return {r[0] for r in rows}


def apply_one(conn: psycopg.Connection, path: Path) -> None:
    version = path.stem
    logger.info("applying migration", extra={"version": version})
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version, applied_at) VALUES (%s, now());",
            (version,),
        )
    conn.commit()


def apply_pending(database_url: str | None = None) -> list[str]:
    """Apply every pending migration in order; returns the applied versions."""
    dsn = database_url or get_settings().database_url
    applied: list[str] = []
    with psycopg.connect(dsn, autocommit=False) as conn:
        for path in pending(list_migrations(), applied_versions(conn)):
            try:
                apply_one(conn, path)
            except psycopg.Error:
                conn.rollback()
                logger.exception("migration failed", extra={"version": path.stem})
                raise
            applied.append(path.stem)
    if not applied:
        logger.info("no pending migrations")
    return applied


def cmd_up() -> int:
    try:
        apply_pending()
    except psycopg.Error:
        return 1
    return 0


def cmd_status() -> int:
    with psycopg.connect(get_settings().database_url) as conn:
        done = applied_versions(conn)
    for path in list_migrations():
        state = "applied" if path.stem in done else "pending"
        print(f"{state:8} {path.stem}")
    return 0


def cmd_new(name: str) -> int:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    path = MIGRATIONS_DIR / f"{ts}_{name}.sql"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("-- write your SQL here\n", encoding="utf-8")
    print(str(path))
    return 0


def main(argv: list[str]) -> int:
    setup_logging(get_settings().log_level)
    usage = "usage: python -m app.infrastructure.db.migrate [up|status|new <name>]"
    if len(argv) < 2:
        print(usage, file=sys.stderr)
        return 2
    cmd = argv[1]
    if cmd == "up":
        return cmd_up()
    if cmd == "status":
        return cmd_status()
    if cmd == "new" and len(argv) >= 3:
        return cmd_new(argv[2])
    print(usage, file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
