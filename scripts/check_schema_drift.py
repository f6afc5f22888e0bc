from __future__ import annotations

import argparse
import sys
from typing import Optional

from alembic.autogenerate import api as ag_api
from alembic.runtime.migration import MigrationContext

from luckydraw.db.engine import make_engine
from luckydraw.models import Base


def _describe(ops, indent: int = 0) -> list[str]:
    lines = []
    for op in ops:
        lines.append(f"{'  ' * indent}- {op}")
        lines.extend(_describe(getattr(op, "ops", None) or [], indent + 1))
    return lines


def check(database_url: Optional[str] = None) -> tuple[int, list[str]]:
    """Compare the lucky-draw models with a live database.

    Returns an exit code (0 in sync, 1 drift, 2 error) and the report lines.
    """
    engine = make_engine(database_url)
    url_display = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(
                connection=connection,
                opts={
                    "compare_type": True,
                    "render_as_batch": connection.dialect.name == "sqlite",
                    # only the lucky-draw tables matter; hosted backends add their own
                    "include_name": lambda name, type_, parent: (
                        type_ != "table" or name in Base.metadata.tables
                    ),
                },
            )
            upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    except Exception as exc:
        return 2, [f"Schema drift check: ERROR for {url_display}: {exc}"]
    finally:
        engine.dispose()

    if upgrade_ops is None:
        return 2, [f"Schema drift check: ERROR for {url_display}: missing upgrade ops."]
    if upgrade_ops.is_empty():
        return 0, [f"Schema drift check: OK for {url_display} ({len(Base.metadata.tables)} tables)."]
    return 1, [f"Schema drift check: FAILED for {url_display}. Differences detected:"] + _describe(
        upgrade_ops.ops or []
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Detect drift between models and database.")
    parser.add_argument("--url", help="database URL (defaults to DB_URL)")
    args = parser.parse_args()
    code, lines = check(args.url)
    print("\n".join(lines), file=sys.stderr if code == 2 else sys.stdout)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
