from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .calendar.controller import register as register_calendar
from .common.datetime_utils import get_zone
from .common.logging import get_logger, setup_logging
from .container import Container, build_container
from .database.bootstrap import prepare_database
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"

log = get_logger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(
        json_output=bool(getattr(settings, "LOG_JSON", False)),
        log_level=str(getattr(settings, "LOG_LEVEL", "INFO")),
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    tz = get_zone(getattr(settings, "SCHOOL_TIMEZONE", None))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        log.info(
            "app_starting",
            settings=settings_module,
            db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            seed = bool(getattr(settings, "AUTO_SEED_DB", False))
            tables = prepare_database(db_config, database_dir=DATABASE_DIR, seed=seed)
            log.info("database_ready", tables=len(tables), seeded=seed)

        container = build_container(db_config=db_config, tz=tz)

    register_schedules(app, container)
    register_calendar(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_users(app, container)

    return app
