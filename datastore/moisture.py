from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from datastore.connection import ConnectionGuard, from_storage_time, to_storage_time
from datastore.errors import NotFoundError, ValidationError
from models.records import SensorReading

logger = logging.getLogger(__name__)

MIN_MOISTURE = 0
MAX_MOISTURE = 100

# SQLite INTEGER is a signed 64-bit value.
MIN_SENSOR_ID = 0
MAX_SENSOR_ID = 2**63 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_moisture(moisture_content: int) -> int:
    if isinstance(moisture_content, bool) or not isinstance(moisture_content, int):
        raise ValidationError("moisture_content must be an integer between 0 to 100")
    if not MIN_MOISTURE <= moisture_content <= MAX_MOISTURE:
        raise ValidationError("moisture_content must be an integer between 0 to 100")
    return moisture_content


def validate_sensor_id(sensor_id: int) -> int:
    if isinstance(sensor_id, bool) or not isinstance(sensor_id, int):
        raise ValidationError("sensor_id must be a non-negative integer")
    if not MIN_SENSOR_ID <= sensor_id <= MAX_SENSOR_ID:
        raise ValidationError(f"sensor_id must be between {MIN_SENSOR_ID} and {MAX_SENSOR_ID}")
    return sensor_id


class MoistureStore:
    """Append-only history of sensor readings in the ``garden_data`` table."""

    def __init__(
        self,
        guard: ConnectionGuard,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.guard = guard
        self._clock = clock

    def record(
        self,
        sensor_id: int,
        moisture_content: int,
        recorded_at: Optional[datetime] = None,
    ) -> SensorReading:
        validate_sensor_id(sensor_id)
        validate_moisture(moisture_content)
        timestamp = recorded_at if recorded_at is not None else self._clock()
        with self.guard.access() as conn:
            conn.execute(
                "INSERT INTO garden_data (sensor_id, moisture_content, time) VALUES (?, ?, ?)",
                (sensor_id, moisture_content, to_storage_time(timestamp)),
            )
        logger.debug(
            "Recorded moisture reading",
            extra={"sensor_id": sensor_id, "moisture_content": moisture_content},
        )
        return SensorReading(
            sensor_id=sensor_id,
            moisture_content=moisture_content,
            recorded_at=from_storage_time(to_storage_time(timestamp)),
        )

    def latest(self, sensor_id: int) -> SensorReading:
        """Newest reading for ``sensor_id``; later inserts win timestamp ties."""
        validate_sensor_id(sensor_id)
        with self.guard.access() as conn:
            row = conn.execute(
                "SELECT sensor_id, moisture_content, time FROM garden_data "
                "WHERE sensor_id = ? ORDER BY time DESC, id DESC LIMIT 1",
                (sensor_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError(f"No readings recorded for sensor {sensor_id}.")
        return SensorReading(
            sensor_id=row["sensor_id"],
            moisture_content=row["moisture_content"],
            recorded_at=from_storage_time(row["time"]),
        )
