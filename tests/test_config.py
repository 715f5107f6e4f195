"""Tests for environment settings and logging setup."""

from __future__ import annotations

import io
import json
import logging

import pytest

from debt_planner.config import Settings
from debt_planner.errors import InvalidInputError
from debt_planner.logging_config import get_logger, setup_logging


def test_defaults():
    settings = Settings.from_env({})

    assert settings.max_schedule_months == 600
    assert settings.preview_rows == 120
    assert settings.log_level == "WARNING"
    assert settings.log_json is False


def test_reads_prefixed_variables():
    settings = Settings.from_env(
        {
            "DEBT_PLANNER_MAX_SCHEDULE_MONTHS": "360",
            "DEBT_PLANNER_PREVIEW_ROWS": "24",
            "DEBT_PLANNER_LOG_LEVEL": "debug",
            "DEBT_PLANNER_LOG_JSON": "yes",
            "DEBT_PLANNER_SECRET_KEY": "s3cret",
        }
    )

    assert settings.max_schedule_months == 360
    assert settings.preview_rows == 24
    assert settings.log_level == "DEBUG"
    assert settings.log_json is True
    assert settings.secret_key == "s3cret"


@pytest.mark.parametrize(
    "environ",
    [
        {"DEBT_PLANNER_MAX_SCHEDULE_MONTHS": "lots"},
        {"DEBT_PLANNER_PREVIEW_ROWS": "0"},
        {"DEBT_PLANNER_LOG_LEVEL": "chatty"},
    ],
)
def test_invalid_values(environ):
    with pytest.raises(InvalidInputError):
        Settings.from_env(environ)


def test_get_logger_nests_under_package():
    assert get_logger("web").name == "debt_planner.web"
    assert get_logger("debt_planner.planner").name == "debt_planner.planner"


def test_json_logging():
    stream = io.StringIO()
    setup_logging("INFO", json_output=True, stream=stream)

    get_logger("tests").info("Compared %d loans", 3, extra={"excluded": 1})

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["level"] == "INFO"
    assert record["logger"] == "debt_planner.tests"
    assert record["message"] == "Compared 3 loans"
    assert record["extra"] == {"excluded": 1}


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        setup_logging("chatty")


def test_setup_logging_replaces_handlers():
    setup_logging("WARNING")
    logger = setup_logging("ERROR")

    assert len(logger.handlers) == 1
    assert logger.level == logging.ERROR
