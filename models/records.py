"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class MoistureTier(str, Enum):
    """Moisture classification driving the watering decision."""

    plenty = "plenty"
    low = "low"
    critical = "critical"


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single moisture reading as stored in ``garden_data``."""

    sensor_id: int
    moisture_content: int
    recorded_at: datetime


@dataclass(frozen=True, slots=True)
class RawForecast:
    """One predicted moment as returned by the forecast provider."""

    forecast_time: datetime
    weather: str
    description: str
    temp: float
    temp_min: float
    temp_max: float
    pressure: float
    humidity: float
    country: str = ""
    city: str = ""


@dataclass(frozen=True, slots=True)
class ForecastEvent:
    """A persisted forecast row, tagged with the fetch that produced it."""

    batch_time: datetime
    forecast_time: datetime
    country: str
    city: str
    weather: str
    description: str
    temp: float
    temp_min: float
    temp_max: float
    pressure: float
    humidity: float

    @classmethod
    def from_raw(cls, raw: RawForecast, batch_time: datetime) -> "ForecastEvent":
        return cls(
            batch_time=batch_time,
            forecast_time=raw.forecast_time,
            country=raw.country,
            city=raw.city,
            weather=raw.weather,
            description=raw.description,
            temp=raw.temp,
            temp_min=raw.temp_min,
            temp_max=raw.temp_max,
            pressure=raw.pressure,
            humidity=raw.humidity,
        )

    def mentions_rain(self) -> bool:
        return "rain" in self.weather.lower() or "rain" in self.description.lower()
