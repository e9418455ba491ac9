"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from datastore.moisture import MAX_SENSOR_ID


class GardenReading(BaseModel):
    """Moisture reading posted by a sensor.

    The 0-100 range is enforced by the service so that out-of-range values
    are reported as a bad request rather than a schema error.
    """

    sensor_id: int = Field(..., ge=0, le=MAX_SENSOR_ID)
    moisture_content: int


class ForecastEventOut(BaseModel):
    """One event of the current forecast batch."""

    model_config = ConfigDict(from_attributes=True)

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
