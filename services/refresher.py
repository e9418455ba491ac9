"""Background forecast refresh loop."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from datastore.errors import StoreError
from datastore.forecast import ForecastStore
from models.records import ForecastEvent
from services.weather import FetchError, ForecastFetcher

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ForecastRefresher:
    """Periodically pulls a forecast batch and writes it to the forecast store.

    A failed cycle is logged and skipped; the next interval starts a fresh
    attempt. The fetch always completes before the store is touched, so the
    connection guard is never held across network I/O.
    """

    def __init__(
        self,
        fetcher: ForecastFetcher,
        store: ForecastStore,
        interval_seconds: float,
        refresh_on_start: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        self.fetcher = fetcher
        self.store = store
        self.interval_seconds = interval_seconds
        self.refresh_on_start = refresh_on_start
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.cycles = 0

    def refresh_once(self) -> Optional[int]:
        """Run one fetch-and-persist cycle; ``None`` means it was skipped."""
        try:
            raw_events = self.fetcher.fetch()
        except FetchError as exc:
            logger.warning("Skipping forecast refresh", extra={"reason": str(exc)})
            return None

        batch_time = self._clock()
        events: list[ForecastEvent] = []
        seen: set[datetime] = set()
        for raw in sorted(raw_events, key=lambda item: item.forecast_time):
            if raw.forecast_time in seen:
                logger.debug(
                    "Dropping duplicate forecast time %s", raw.forecast_time.isoformat()
                )
                continue
            seen.add(raw.forecast_time)
            events.append(ForecastEvent.from_raw(raw, batch_time))

        try:
            return self.store.record_batch(events)
        except StoreError as exc:
            logger.warning(
                "Forecast batch not fully persisted",
                extra={"batch_time": batch_time.isoformat(), "reason": str(exc)},
            )
            return None

    def run(self) -> None:
        logger.info(
            "Forecast refresher started",
            extra={"interval_seconds": self.interval_seconds},
        )
        if self.refresh_on_start:
            self._cycle()
        while not self._stop_event.wait(self.interval_seconds):
            self._cycle()
        logger.info("Forecast refresher stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, name="forecast-refresher", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _cycle(self) -> None:
        try:
            self.refresh_once()
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error during forecast refresh")
        finally:
            self.cycles += 1
