"""Unit tests for the moisture reading store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from datastore.connection import ConnectionGuard
from datastore.errors import NotFoundError, ValidationError
from datastore.moisture import MoistureStore


def _row_count(guard: ConnectionGuard, sensor_id: int) -> int:
    with guard.access() as conn:
        return conn.execute(
            "SELECT COUNT(*) FROM garden_data WHERE sensor_id = ?", (sensor_id,)
        ).fetchone()[0]


@pytest.fixture()
def store() -> MoistureStore:
    return MoistureStore(ConnectionGuard())


@pytest.mark.parametrize("moisture", [0, 1, 10, 25, 50, 99, 100])
def test_record_accepts_in_range_values(store: MoistureStore, moisture: int) -> None:
    reading = store.record(7, moisture)

    assert reading.sensor_id == 7
    assert reading.moisture_content == moisture
    assert reading.recorded_at.tzinfo is not None
    assert _row_count(store.guard, 7) == 1


@pytest.mark.parametrize("moisture", [-1, 101, 150, 10_000, True])
def test_record_rejects_out_of_range_values(store: MoistureStore, moisture: int) -> None:
    with pytest.raises(ValidationError, match="between 0 to 100"):
        store.record(2, moisture)

    assert _row_count(store.guard, 2) == 0


def test_latest_returns_most_recent_write(store: MoistureStore) -> None:
    store.record(1, 30)
    store.record(1, 5)

    assert store.latest(1).moisture_content == 5


def test_latest_is_stable_without_writes(store: MoistureStore) -> None:
    store.record(1, 42)

    assert store.latest(1) == store.latest(1)


def test_latest_prefers_later_insert_on_equal_timestamps(store: MoistureStore) -> None:
    moment = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)
    store.record(1, 30, recorded_at=moment)
    store.record(1, 5, recorded_at=moment)

    latest = store.latest(1)
    assert latest.moisture_content == 5
    assert latest.recorded_at == moment


def test_latest_uses_recorded_time_not_insert_order(store: MoistureStore) -> None:
    newer = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
    store.record(1, 40, recorded_at=newer)
    store.record(1, 20, recorded_at=newer - timedelta(hours=1))

    assert store.latest(1).moisture_content == 40


def test_latest_is_scoped_per_sensor(store: MoistureStore) -> None:
    store.record(1, 80)
    store.record(2, 3)

    assert store.latest(1).moisture_content == 80
    assert store.latest(2).moisture_content == 3


def test_latest_unknown_sensor_raises_not_found(store: MoistureStore) -> None:
    with pytest.raises(NotFoundError, match="sensor 99"):
        store.latest(99)


def test_record_uses_injected_clock() -> None:
    moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
    store = MoistureStore(ConnectionGuard(), clock=lambda: moment)

    store.record(3, 12)

    assert store.latest(3).recorded_at == moment


@pytest.mark.parametrize("sensor_id", [-1, 2**63, 2**70, True])
def test_sensor_id_outside_storage_range_is_rejected(store: MoistureStore, sensor_id: int) -> None:
    with pytest.raises(ValidationError, match="sensor_id"):
        store.record(sensor_id, 50)
    with pytest.raises(ValidationError, match="sensor_id"):
        store.latest(sensor_id)

    with store.guard.access() as conn:
        assert conn.execute("SELECT COUNT(*) FROM garden_data").fetchone()[0] == 0


def test_largest_sensor_id_round_trips(store: MoistureStore) -> None:
    store.record(2**63 - 1, 12)

    assert store.latest(2**63 - 1).moisture_content == 12
