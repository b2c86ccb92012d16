from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from train_journey.core.failure import formula_by_name
from train_journey.core.policy import ControllerPolicy, ExpressExitPolicy


def load_env_file(path: Path | None = None) -> bool:
    """Load a `.env` file (if present) without overriding the real environment."""

    env_path = path or Path.cwd() / ".env"
    if not env_path.exists():
        return False
    return load_dotenv(dotenv_path=env_path, override=False)


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def get_session_ttl_seconds() -> int:
    raw = os.environ.get("TRAIN_JOURNEY_SESSION_TTL_SECONDS", "3600")
    try:
        ttl = int(raw)
    except ValueError as e:
        raise ValueError(f"TRAIN_JOURNEY_SESSION_TTL_SECONDS must be an integer (got {raw!r})") from e
    if ttl <= 0:
        raise ValueError("TRAIN_JOURNEY_SESSION_TTL_SECONDS must be positive")
    return ttl


def get_log_level() -> int:
    raw = os.environ.get("TRAIN_JOURNEY_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ValueError(f"TRAIN_JOURNEY_LOG_LEVEL is not a logging level: {raw!r}")
    return level


def get_policy() -> ControllerPolicy:
    formula_name = os.environ.get("TRAIN_JOURNEY_FAILURE_FORMULA", "progressive")
    exit_raw = os.environ.get("TRAIN_JOURNEY_EXPRESS_EXIT", ExpressExitPolicy.at_final_stop.value)
    try:
        formula = formula_by_name(formula_name)
    except ValueError as e:
        raise ValueError(f"TRAIN_JOURNEY_FAILURE_FORMULA: {e}") from e
    try:
        express_exit = ExpressExitPolicy(exit_raw.strip().casefold())
    except ValueError as e:
        allowed = ",".join(p.value for p in ExpressExitPolicy)
        raise ValueError(f"TRAIN_JOURNEY_EXPRESS_EXIT must be one of {allowed} (got {exit_raw!r})") from e
    return ControllerPolicy(failure_formula=formula, express_exit=express_exit)


def validate_settings() -> None:
    """Parse every setting once so a bad environment fails at startup, not per request."""

    get_policy()
    get_session_ttl_seconds()
    get_log_level()
