from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_utils import setup_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .schedules.controller import register as register_schedules

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Flask app factory; pass a prebuilt container to skip MySQL wiring (tests)."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), json_output=bool(getattr(settings, "LOG_JSON", False)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "starting attendance engine",
            extra={
                "settings": settings_module,
                "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
            },
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready", extra={"tables": len(list_tables(db_config))})

        container = build_container(db_config=db_config, engine_config=getattr(settings, "ENGINE_CONFIG", None))

    app.extensions["attendance_engine"] = container
    register_attendance(app, container)
    register_schedules(app, container)

    return app
