"""Rain-aware watering decisions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from datastore.errors import NotFoundError, StorageError
from datastore.forecast import ForecastStore
from datastore.moisture import MoistureStore
from models.records import MoistureTier
from services.classifier import classify

logger = logging.getLogger(__name__)

DEFAULT_RAIN_WINDOW = timedelta(hours=12)


class DecisionError(Exception):
    """A watering decision could not be made."""


class UnknownSensorError(DecisionError):
    def __init__(self, sensor_id: int) -> None:
        super().__init__(f"Sensor {sensor_id} has no recorded readings.")
        self.sensor_id = sensor_id


class ForecastUnavailableError(DecisionError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Forecast lookup failed: {reason}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DecisionEngine:
    """Decides whether a sensor's zone should be watered now.

    Plenty and critical readings are decided from moisture alone. Only a low
    reading consults the forecast store, for rain between now and
    ``now + rain_window``.
    """

    def __init__(
        self,
        moisture_store: MoistureStore,
        forecast_store: ForecastStore,
        rain_window: timedelta = DEFAULT_RAIN_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.moisture_store = moisture_store
        self.forecast_store = forecast_store
        self.rain_window = rain_window
        self._clock = clock

    def should_water(self, sensor_id: int) -> bool:
        try:
            reading = self.moisture_store.latest(sensor_id)
        except NotFoundError as exc:
            raise UnknownSensorError(sensor_id) from exc

        tier = classify(reading.moisture_content)
        if tier is MoistureTier.plenty:
            decision = False
        elif tier is MoistureTier.critical:
            decision = True
        else:
            now = self._clock()
            try:
                rain = self.forecast_store.rain_expected(now, now + self.rain_window)
            except StorageError as exc:
                raise ForecastUnavailableError(str(exc)) from exc
            decision = not rain

        logger.info(
            "Watering decision made",
            extra={
                "sensor_id": sensor_id,
                "moisture_content": reading.moisture_content,
                "tier": tier.value,
                "decision": "yes" if decision else "no",
            },
        )
        return decision
