from __future__ import annotations

import os
import sys
from typing import NoReturn

from alembic import command
from alembic.config import Config as AlembicConfig

# Ensure project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from carbon.db import get_session, init_engine  # noqa: E402
from carbon.factors import DEFAULT_FACTOR_VERSION, DEFAULT_REGION, seed_default_factors  # noqa: E402


def run_migrations(database_url: str) -> None:
    acfg = AlembicConfig(os.path.join(ROOT, "alembic.ini"))
    # Pass URL via env override supported by migrations/env.py
    os.environ.setdefault("DATABASE_URL", database_url)
    command.upgrade(acfg, "heads")


def seed_factors() -> None:
    """Insert the default factor set if that version/region has no rows yet."""
    version = os.environ.get("FACTOR_VERSION", DEFAULT_FACTOR_VERSION)
    region = os.environ.get("FACTOR_REGION", DEFAULT_REGION)
    db = get_session()
    try:
        added = seed_default_factors(db, version, region)
        print(f"Seeded {added} emission factor rows for {version}/{region}")
    finally:
        db.close()


def main() -> NoReturn:
    url = os.environ.get("DATABASE_URL", "sqlite:///dev.db")
    print(f"Using DATABASE_URL={url}")
    init_engine(url, force=True)
    run_migrations(url)
    seed_factors()
    print("Done.")
    raise SystemExit(0)


if __name__ == "__main__":
    main()
