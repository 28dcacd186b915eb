"""Database maintenance from the command line.

    APP_ENV=production python scripts/manage_db.py init
    python scripts/manage_db.py seed
    python scripts/manage_db.py tables
"""

from __future__ import annotations

import argparse
import importlib
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from school_admin.common.logging import get_logger, setup_logging
from school_admin.database.bootstrap import apply_seed_sql, list_tables, prepare_database

DATABASE_DIR = Path(__file__).resolve().parents[1] / "database"

log = get_logger("manage_db")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create, seed or inspect the school_admin database.")
    parser.add_argument("command", choices=["init", "seed", "tables"])
    parser.add_argument("--with-seed", action="store_true", help="init: also load seed.sql")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(json_output=bool(getattr(settings, "LOG_JSON", False)), log_level="INFO")
    db_config = dict(settings.DB_CONFIG)
    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"

    if args.command == "init":
        tables = prepare_database(db_config, database_dir=DATABASE_DIR, seed=args.with_seed)
        log.info("schema_applied", target=target, tables=len(tables), seeded=args.with_seed)
    elif args.command == "seed":
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        log.info("seed_applied", target=target)
    else:
        for name in list_tables(db_config):
            print(name)


if __name__ == "__main__":
    main()
