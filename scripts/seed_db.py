"""Load the demo org chart, calendar entries and config into MySQL.

Rows that already exist are left alone, so the script can be re-run.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_backoffice.hr_backoffice.common.logging import setup_logging
from src.hr_backoffice.hr_backoffice.container import build_store
from src.hr_backoffice.hr_backoffice.database.connection import DBConfig
from src.hr_backoffice.hr_backoffice.database.seed import seed_demo_data


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    inserted = seed_demo_data(build_store(backend="mysql", db_config=db_config))
    print(f"OK: {DBConfig.from_mapping(db_config).label} seeded ({inserted} new row(s))")


if __name__ == "__main__":
    main()
