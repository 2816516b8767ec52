from __future__ import annotations

import argparse
import logging
from pathlib import Path

from plan_orchestrator.config.settings import get_settings
from plan_orchestrator.storage.database import Database

logger = logging.getLogger(__name__)

SIDECAR_SUFFIXES = ("-wal", "-shm")


def _parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Delete the planning SQLite database and recreate an empty schema."
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=Path(settings.database_path),
        help=f"SQLite database file to reset (default: {settings.database_path}).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Logging level (default: from PLAN_ORCHESTRATOR_LOG_LEVEL or INFO).",
    )
    return parser.parse_args()


def reset_database(database_path: Path, *, wal: bool = True) -> list[Path]:
    """Remove the database file and its WAL/SHM companions, then migrate a fresh one."""
    database_path = database_path.expanduser().resolve()
    candidates = [database_path] + [
        database_path.with_name(database_path.name + suffix) for suffix in SIDECAR_SUFFIXES
    ]
    removed: list[Path] = []
    for path in candidates:
        if path.exists():
            logger.info("Deleting %s", path)
            path.unlink()
            removed.append(path)

    with Database(database_path, wal=wal) as database:
        database.migrate()
    return removed


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    removed = reset_database(args.database, wal=get_settings().sqlite_wal)
    print(f"Removed {len(removed)} file(s).")
    print(f"Database reset at: {args.database.expanduser().resolve()}")


if __name__ == "__main__":
    main()
