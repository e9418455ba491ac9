from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_DATABASE_PATH_ENV = "SMARTGARDEN_DATABASE_PATH"
_API_KEY_ENV = "OPENWEATHER_API_KEY"
_API_URL_ENV = "OPENWEATHER_URL"
_CITY_ENV = "FORECAST_CITY"
_COUNTRY_ENV = "FORECAST_COUNTRY"
_REFRESH_SECONDS_ENV = "FORECAST_REFRESH_SECONDS"
_REFRESH_ON_START_ENV = "FORECAST_REFRESH_ON_START"
_TIMEOUT_ENV = "FORECAST_TIMEOUT_SECONDS"
_RAIN_WINDOW_ENV = "RAIN_WINDOW_HOURS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    database_path: str
    forecast_api_key: Optional[str]
    forecast_api_url: str
    forecast_city: str
    forecast_country: str
    forecast_refresh_seconds: float
    forecast_refresh_on_start: bool
    forecast_timeout_seconds: float
    rain_window_hours: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_path=_read_str_env(_DATABASE_PATH_ENV, "./tmp/smartgarden.db"),
        forecast_api_key=_read_optional_env(_API_KEY_ENV, None),
        forecast_api_url=_read_str_env(
            _API_URL_ENV, "https://api.openweathermap.org/data/2.5/forecast"
        ),
        forecast_city=_read_str_env(_CITY_ENV, "London"),
        forecast_country=_read_str_env(_COUNTRY_ENV, "GB"),
        forecast_refresh_seconds=_read_positive_float(_REFRESH_SECONDS_ENV, 10800.0),
        forecast_refresh_on_start=_read_bool(_REFRESH_ON_START_ENV, False),
        forecast_timeout_seconds=_read_positive_float(_TIMEOUT_ENV, 10.0),
        rain_window_hours=_read_positive_float(_RAIN_WINDOW_ENV, 12.0),
        log_level=_read_log_level("INFO"),
    )
