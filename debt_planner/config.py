"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .amortization import MAX_SCHEDULE_MONTHS
from .errors import InvalidInputError

ENV_PREFIX = "DEBT_PLANNER_"


def _env_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        number = int(value)
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise InvalidInputError(f"{name} must be positive, got {number}")
    return number


@dataclass
class Settings:
    max_schedule_months: int = MAX_SCHEDULE_MONTHS
    preview_rows: int = 120  # schedule rows shown before truncating
    log_level: str = "WARNING"
    log_json: bool = False
    secret_key: str = "dev-secret-key"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", cls.log_level).strip().upper()
        if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise InvalidInputError(f"{ENV_PREFIX}LOG_LEVEL is not a log level: {log_level!r}")
        return cls(
            max_schedule_months=_env_positive_int(env, f"{ENV_PREFIX}MAX_SCHEDULE_MONTHS", MAX_SCHEDULE_MONTHS),
            preview_rows=_env_positive_int(env, f"{ENV_PREFIX}PREVIEW_ROWS", cls.preview_rows),
            log_level=log_level,
            log_json=_env_bool(env, f"{ENV_PREFIX}LOG_JSON"),
            secret_key=env.get(f"{ENV_PREFIX}SECRET_KEY", cls.secret_key),
        )
