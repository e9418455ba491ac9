"""Service layer wiring the garden stores, decision engine and refresher."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from datastore.connection import ConnectionGuard, build_default_guard
from datastore.errors import ValidationError
from datastore.forecast import ForecastStore
from datastore.moisture import MoistureStore
from models.records import ForecastEvent, SensorReading
from services.decision import DEFAULT_RAIN_WINDOW, DecisionEngine
from services.refresher import ForecastRefresher
from services.weather import OpenWeatherClient
from settings import get_settings

logger = logging.getLogger(__name__)


class GardenService:
    """Entry point for the HTTP layer; owns the storage handle and refresher."""

    def __init__(
        self,
        guard: ConnectionGuard,
        engine: DecisionEngine,
        refresher: Optional[ForecastRefresher] = None,
    ) -> None:
        self.guard = guard
        self.engine = engine
        self.moisture_store = engine.moisture_store
        self.forecast_store = engine.forecast_store
        self.refresher = refresher

    @classmethod
    def with_guard(
        cls,
        guard: ConnectionGuard,
        rain_window: timedelta = DEFAULT_RAIN_WINDOW,
    ) -> "GardenService":
        engine = DecisionEngine(
            moisture_store=MoistureStore(guard),
            forecast_store=ForecastStore(guard),
            rain_window=rain_window,
        )
        return cls(guard=guard, engine=engine)

    def log_reading(self, sensor_id: int, moisture_content: int) -> SensorReading:
        """Validate and persist a reading; out-of-range values never reach storage."""
        try:
            return self.moisture_store.record(sensor_id, moisture_content)
        except ValidationError:
            logger.warning(
                "Rejected moisture reading",
                extra={"sensor_id": sensor_id, "moisture_content": moisture_content},
            )
            raise

    def can_i_water(self, sensor_id: int) -> bool:
        return self.engine.should_water(sensor_id)

    def current_forecast(self) -> list[ForecastEvent]:
        return self.forecast_store.latest_batch()

    def start(self) -> None:
        if self.refresher is not None:
            self.refresher.start()

    def shutdown(self) -> None:
        """Stop the refresher and release the storage handle."""
        if self.refresher is not None:
            self.refresher.stop(timeout=5.0)
            fetcher = self.refresher.fetcher
            if isinstance(fetcher, OpenWeatherClient):
                fetcher.close()
        self.guard.close()


@lru_cache
def build_default_service() -> GardenService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    guard = build_default_guard()
    service = GardenService.with_guard(
        guard, rain_window=timedelta(hours=settings.rain_window_hours)
    )

    if settings.forecast_api_key:
        client = OpenWeatherClient(
            api_key=settings.forecast_api_key,
            city=settings.forecast_city,
            country=settings.forecast_country,
            base_url=settings.forecast_api_url,
            timeout=settings.forecast_timeout_seconds,
        )
        service.refresher = ForecastRefresher(
            fetcher=client,
            store=service.forecast_store,
            interval_seconds=settings.forecast_refresh_seconds,
            refresh_on_start=settings.forecast_refresh_on_start,
        )
    else:
        logger.warning("OPENWEATHER_API_KEY is not set; forecast refresh is disabled.")
    return service
