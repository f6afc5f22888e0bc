from __future__ import annotations

import argparse
import json

from luckydraw.bootstrap import build_app
from luckydraw.config import configure_logging


def main() -> int:
    """Print which storage tier currently serves contests, prizes and participants."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--json", action="store_true", help="emit the status as JSON")
    parser.add_argument(
        "--probe-insert",
        action="store_true",
        help="also insert and delete a throwaway contest through the remote store",
    )
    args = parser.parse_args()

    configure_logging()
    app = build_app()
    status = app.monitor.get_storage_status()
    if args.json:
        print(json.dumps(status.to_json(), indent=2))
    else:
        print(app.monitor.format_report(status))

    print("Remote connection:", "ok" if app.monitor.test_connection() else "unavailable")
    if args.probe_insert:
        print("Remote insert:", "ok" if app.monitor.test_insert() else "rejected")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
