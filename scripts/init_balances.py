"""Recompute and store PTO balance snapshots for every user.

Usage: python scripts/init_balances.py [year] [--admin-email admin@example.org]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_backoffice.hr_backoffice.common.logging import setup_logging
from src.hr_backoffice.hr_backoffice.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("year", nargs="?", default=None)
    parser.add_argument("--admin-email", required=True)
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        store_backend=getattr(settings, "STORE_BACKEND", "mysql"),
    )
    admin = container.directory.get_by_email(args.admin_email)
    if admin is None:
        sys.exit(f"No user with email {args.admin_email}")

    result = container.balance_engine.initialize_all_balances(actor=admin, year=args.year)
    print(f"OK: {result['message']} (year={result['year']})")


if __name__ == "__main__":
    main()
