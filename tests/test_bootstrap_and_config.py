from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from src.attendance_engine.attendance_engine.common.logging_utils import JsonFormatter
from src.attendance_engine.attendance_engine.core.config import EngineConfig
from src.attendance_engine.attendance_engine.core.enums import DuplicatePolicy
from src.attendance_engine.attendance_engine.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use
from src.attendance_engine.attendance_engine.database.connection import DBConfig

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def test_schema_splits_into_create_statements():
    statements = list(_iter_sql_statements(_strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))))

    assert len(statements) == 4
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "-- comment; ignored\nINSERT INTO t VALUES ('a;b');\nUSE other;\nSELECT 1"

    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_db_config_defaults():
    cfg = DBConfig.from_mapping({"host": "db", "port": "3307"})

    assert (cfg.host, cfg.port, cfg.user, cfg.database) == ("db", 3307, "root", "attendance_db")


def test_engine_config_from_settings_mapping():
    cfg = EngineConfig.from_mapping(
        {"duplicate_policy": "strict", "special_holidays": "Ninoy Aquino Day, All Saints' Day,", "progress_every": 0}
    )

    assert cfg.duplicate_policy == DuplicatePolicy.STRICT
    assert cfg.special_holidays == frozenset({"ninoy aquino day", "all saints' day"})
    assert cfg.progress_every == 1
    assert EngineConfig.from_mapping(None) == EngineConfig()


def test_engine_config_rejects_unknown_policy():
    with pytest.raises(ValueError):
        EngineConfig.from_mapping({"duplicate_policy": "lenient"})


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("attendance", logging.INFO, __file__, 1, "import finished", None, None)
    record.job_id = "job-1"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "import finished"
    assert payload["level"] == "INFO"
    assert payload["job_id"] == "job-1"
