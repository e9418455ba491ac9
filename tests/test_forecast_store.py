"""Unit tests for forecast batch storage and the rain lookup."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from datastore.connection import ConnectionGuard
from datastore.errors import StorageError, ValidationError
from datastore.forecast import ForecastStore
from models.records import ForecastEvent

NOW = datetime(2024, 7, 1, 6, 0, tzinfo=timezone.utc)


def _event(
    batch_time: datetime,
    offset_hours: float,
    weather: Optional[str] = "Clear",
    description: str = "clear sky",
) -> ForecastEvent:
    return ForecastEvent(
        batch_time=batch_time,
        forecast_time=NOW + timedelta(hours=offset_hours),
        country="GB",
        city="London",
        weather=weather,  # type: ignore[arg-type]
        description=description,
        temp=18.5,
        temp_min=17.0,
        temp_max=19.2,
        pressure=1012.0,
        humidity=71.0,
    )


@pytest.fixture()
def store() -> ForecastStore:
    return ForecastStore(ConnectionGuard())


def test_no_forecast_data_means_no_rain(store: ForecastStore) -> None:
    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is False
    assert store.latest_batch() == []


def test_record_batch_returns_written_count(store: ForecastStore) -> None:
    batch = [_event(NOW, 3), _event(NOW, 6), _event(NOW, 9)]

    assert store.record_batch(batch) == 3
    assert store.record_batch([]) == 0
    assert [event.forecast_time for event in store.latest_batch()] == [
        NOW + timedelta(hours=3),
        NOW + timedelta(hours=6),
        NOW + timedelta(hours=9),
    ]


def test_rain_inside_window_is_detected(store: ForecastStore) -> None:
    store.record_batch([_event(NOW, 3), _event(NOW, 6, weather="Rain", description="light rain")])

    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is True


def test_rain_outside_window_is_ignored(store: ForecastStore) -> None:
    store.record_batch([_event(NOW, 3), _event(NOW, 15, weather="Rain", description="light rain")])

    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is False


def test_window_bounds_are_inclusive(store: ForecastStore) -> None:
    store.record_batch([_event(NOW, 0, weather="Rain"), _event(NOW, 12, weather="Rain")])

    assert store.rain_expected(NOW, NOW) is True
    assert store.rain_expected(NOW + timedelta(hours=12), NOW + timedelta(hours=13)) is True
    assert store.rain_expected(NOW + timedelta(hours=1), NOW + timedelta(hours=11)) is False


@pytest.mark.parametrize(
    ("weather", "description"),
    [
        ("RAIN", "moderate"),
        ("rain", ""),
        ("Thunderstorm", "thunderstorm with light rain"),
        ("Clouds", "Freezing Rain"),
    ],
)
def test_rain_match_is_case_insensitive_on_category_or_description(
    store: ForecastStore, weather: str, description: str
) -> None:
    store.record_batch([_event(NOW, 2, weather=weather, description=description)])

    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is True


def test_later_batch_supersedes_earlier_one(store: ForecastStore) -> None:
    earlier = NOW - timedelta(hours=3)
    store.record_batch([_event(earlier, 2, weather="Rain")])
    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is True

    store.record_batch([_event(NOW, 2, weather="Clear")])

    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is False
    assert {event.batch_time for event in store.latest_batch()} == {NOW}


def test_current_batch_follows_batch_time_not_insert_order(store: ForecastStore) -> None:
    store.record_batch([_event(NOW, 2, weather="Rain")])
    store.record_batch([_event(NOW - timedelta(hours=3), 2, weather="Clear")])

    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is True


def test_identical_batch_times_form_one_batch(store: ForecastStore) -> None:
    store.record_batch([_event(NOW, 2)])
    store.record_batch([_event(NOW, 4, weather="Rain")])

    assert len(store.latest_batch()) == 2
    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is True


def test_mixed_batch_times_are_rejected(store: ForecastStore) -> None:
    with pytest.raises(ValidationError):
        store.record_batch([_event(NOW, 2), _event(NOW + timedelta(seconds=1), 4)])

    assert store.latest_batch() == []


def test_failed_write_leaves_partial_batch_until_superseded(store: ForecastStore) -> None:
    broken = [_event(NOW, 2, weather="Rain"), _event(NOW, 4), _event(NOW, 6, weather=None)]

    with pytest.raises(StorageError):
        store.record_batch(broken)

    partial = store.latest_batch()
    assert [event.forecast_time for event in partial] == [
        NOW + timedelta(hours=2),
        NOW + timedelta(hours=4),
    ]
    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is True

    refreshed = NOW + timedelta(hours=3)
    store.record_batch([_event(refreshed, 2), _event(refreshed, 4), _event(refreshed, 6)])

    current = store.latest_batch()
    assert len(current) == 3
    assert {event.batch_time for event in current} == {refreshed}
    assert store.rain_expected(NOW, NOW + timedelta(hours=12)) is False


def test_repeated_forecast_time_in_one_batch_is_rejected(store: ForecastStore) -> None:
    with pytest.raises(ValidationError, match="distinct"):
        store.record_batch([_event(NOW, 3), _event(NOW, 3, weather="Rain")])

    assert store.latest_batch() == []


def test_repeated_forecast_time_across_calls_with_same_batch_time_fails(
    store: ForecastStore,
) -> None:
    store.record_batch([_event(NOW, 3)])

    with pytest.raises(StorageError):
        store.record_batch([_event(NOW, 3, weather="Rain")])

    batch = store.latest_batch()
    assert len(batch) == 1
    assert batch[0].weather == "Clear"
