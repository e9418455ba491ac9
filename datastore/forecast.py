from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Sequence

from datastore.connection import ConnectionGuard, from_storage_time, to_storage_time
from datastore.errors import ValidationError
from models.records import ForecastEvent

logger = logging.getLogger(__name__)

_CURRENT_BATCH = "(SELECT MAX(batch_time) FROM forecast)"


class ForecastStore:
    """Forecast events grouped into batches by ``batch_time``.

    The current forecast is the batch with the greatest ``batch_time``; older
    batches stay in the table but are never read. Batches recorded with an
    identical ``batch_time`` count as one batch. A ``forecast_time`` appears at
    most once per batch; a repeat is rejected before any write within one
    call, and by the unique index across calls.

    Rows of a batch are committed one by one. If a write fails partway the
    rows already written remain, so the table can hold a partial batch. It
    stays current until a later batch is recorded, which then fully replaces
    it.
    """

    def __init__(self, guard: ConnectionGuard) -> None:
        self.guard = guard

    def record_batch(self, events: Sequence[ForecastEvent]) -> int:
        if not events:
            return 0
        batch_times = {event.batch_time for event in events}
        if len(batch_times) != 1:
            raise ValidationError("All events of a forecast batch must share one batch_time.")
        if len({event.forecast_time for event in events}) != len(events):
            raise ValidationError("Forecast times within a batch must be distinct.")
        batch_time = to_storage_time(events[0].batch_time)

        written = 0
        with self.guard.access() as conn:
            for event in events:
                conn.execute(
                    "INSERT INTO forecast (batch_time, country, city, time, weather, "
                    "description, temp, temp_min, temp_max, pressure, humidity) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        batch_time,
                        event.country,
                        event.city,
                        to_storage_time(event.forecast_time),
                        event.weather,
                        event.description,
                        event.temp,
                        event.temp_min,
                        event.temp_max,
                        event.pressure,
                        event.humidity,
                    ),
                )
                written += 1
        logger.info(
            "Recorded forecast batch",
            extra={"batch_time": batch_time, "event_count": written},
        )
        return written

    def rain_expected(self, window_start: datetime, window_end: datetime) -> bool:
        """Whether the current batch forecasts rain within the inclusive window.

        No forecast data at all means no rain expected.
        """
        with self.guard.access() as conn:
            rows = conn.execute(
                "SELECT * FROM forecast "
                f"WHERE batch_time = {_CURRENT_BATCH} AND time BETWEEN ? AND ?",
                (to_storage_time(window_start), to_storage_time(window_end)),
            ).fetchall()
        return any(_row_to_event(row).mentions_rain() for row in rows)

    def latest_batch(self) -> list[ForecastEvent]:
        with self.guard.access() as conn:
            rows = conn.execute(
                "SELECT * FROM forecast "
                f"WHERE batch_time = {_CURRENT_BATCH} ORDER BY time, id"
            ).fetchall()
        return [_row_to_event(row) for row in rows]


def _row_to_event(row: sqlite3.Row) -> ForecastEvent:
    return ForecastEvent(
        batch_time=from_storage_time(row["batch_time"]),
        forecast_time=from_storage_time(row["time"]),
        country=row["country"],
        city=row["city"],
        weather=row["weather"],
        description=row["description"],
        temp=row["temp"],
        temp_min=row["temp_min"],
        temp_max=row["temp_max"],
        pressure=row["pressure"],
        humidity=row["humidity"],
    )
