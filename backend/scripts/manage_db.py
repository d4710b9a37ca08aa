#!/usr/bin/env python3
"""
Database maintenance for School Admin

    python scripts/manage_db.py check       # can we connect?
    python scripts/manage_db.py create      # create missing tables
    python scripts/manage_db.py seed        # create tables and load sample data
    python scripts/manage_db.py clear       # delete all sample data
    python scripts/manage_db.py reconcile   # recount occupants of every room
    python scripts/manage_db.py tables      # list tables and column counts

Exit status is non-zero when the command fails or reconcile reports warnings.
"""
import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import inspect, text  # noqa: E402
from sqlalchemy.engine.url import make_url  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.core.database import AsyncSessionLocal, close_db, get_engine, init_db  # noqa: E402
from app.core.logging_config import logger  # noqa: E402
from app.db.seed_data import clear_all, seed_all  # noqa: E402
from app.services.room_status_writer import room_status_writer  # noqa: E402


async def check() -> int:
    target = make_url(settings.DATABASE_URL).render_as_string(hide_password=True)
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info(f"[DB] Connected to {target}")
    return 0


async def create() -> int:
    await init_db()
    logger.info("[DB] Tables created")
    return 0


async def seed() -> int:
    await seed_all()
    return 0


async def clear() -> int:
    await clear_all()
    return 0


async def reconcile() -> int:
    async with AsyncSessionLocal() as session:
        updates = await room_status_writer.reconcile_all(session)

    problems = [u.warning for u in updates if u.warning]
    logger.info(
        f"[DB] Reconciled {len(updates)} rooms, "
        f"{sum(u.written for u in updates)} corrected, {len(problems)} warnings"
    )
    for problem in problems:
        logger.warning(f"[DB] {problem}")
    return 1 if problems else 0


async def tables() -> int:
    def describe(sync_conn):
        inspector = inspect(sync_conn)
        return {name: len(inspector.get_columns(name)) for name in inspector.get_table_names()}

    async with get_engine().connect() as conn:
        columns = await conn.run_sync(describe)

    for name in sorted(columns):
        print(f"{name:<28} {columns[name]:>3} columns")
    print(f"{len(columns)} tables")
    return 0


COMMANDS = {
    "check": (check, "Test the database connection"),
    "create": (create, "Create missing tables"),
    "seed": (seed, "Create tables and load sample data"),
    "clear": (clear, "Delete all sample data"),
    "reconcile": (reconcile, "Recount active occupants of every room"),
    "tables": (tables, "List tables"),
}


async def run(command: str) -> int:
    handler, _ = COMMANDS[command]
    try:
        return await handler()
    except Exception as e:
        logger.log_error_with_context(e, context=f"manage_db {command}")
        return 1
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description="School Admin database maintenance")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, (_, help_text) in COMMANDS.items():
        sub.add_parser(name, help=help_text)
    args = parser.parse_args()
    return asyncio.run(run(args.command))


if __name__ == "__main__":
    sys.exit(main())
