import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional


_ENV_PREFIX = "BASKET_"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    request_timeout_seconds: float = 5.0
    log_level: str = "INFO"
    date_format: str = "%d-%b-%Y"


def _to_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_log_level(value: Any, default: str) -> str:
    if not value:
        return default
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return default
    return level


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Settings:
    environ = os.environ if environ is None else environ
    defaults = Settings()
    timeout = _to_float(
        environ.get(f"{_ENV_PREFIX}REQUEST_TIMEOUT_SECONDS"), defaults.request_timeout_seconds
    )
    if timeout <= 0:
        timeout = defaults.request_timeout_seconds
    return Settings(
        request_timeout_seconds=timeout,
        log_level=_to_log_level(environ.get(f"{_ENV_PREFIX}LOG_LEVEL"), defaults.log_level),
        date_format=defaults.date_format,
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return settings_from_env()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
