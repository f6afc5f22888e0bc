"""Bring the configured database up to date and report missing lucky-draw tables."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from luckydraw.config import configure_logging
from luckydraw.db.engine import make_engine
from luckydraw.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config(database_url: Optional[str] = None) -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    if database_url:
        # read back by alembic/env.py through context.get_x_argument()
        cfg.cmd_opts = argparse.Namespace(x=[f"db_url={database_url}"])
    return cfg


def missing_tables(database_url: Optional[str] = None) -> list[str]:
    engine = make_engine(database_url)
    try:
        present = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    return sorted(set(Base.metadata.tables) - present)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", help="database URL (defaults to DB_URL)")
    parser.add_argument("--revision", default="head", help="target revision (default: head)")
    parser.add_argument(
        "--downgrade", action="store_true", help="downgrade to --revision instead of upgrading"
    )
    args = parser.parse_args()

    configure_logging()
    cfg = alembic_config(args.url)
    if args.downgrade:
        command.downgrade(cfg, args.revision)
        return 0
    command.upgrade(cfg, args.revision)

    missing = missing_tables(args.url)
    if missing:
        print("Missing tables:", ", ".join(missing))
        return 1
    print("Lucky draw schema ready:", ", ".join(sorted(Base.metadata.tables)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
