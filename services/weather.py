"""OpenWeatherMap forecast client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Sequence

import httpx

from models.records import RawForecast


class FetchError(Exception):
    """The forecast provider could not be reached or returned unusable data."""


class ForecastFetcher(Protocol):
    def fetch(self) -> Sequence[RawForecast]: ...


class OpenWeatherClient:
    """Fetches the 5 day / 3 hour forecast for one configured location."""

    def __init__(
        self,
        api_key: str,
        city: str,
        country: str,
        base_url: str = "https://api.openweathermap.org/data/2.5/forecast",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.city = city
        self.country = country
        self._api_key = api_key
        self._url = base_url
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch(self) -> list[RawForecast]:
        params = {
            "q": f"{self.city},{self.country}",
            "appid": self._api_key,
            "units": "metric",
        }
        try:
            response = self._client.get(self._url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Forecast request failed with status {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Forecast request failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError("Forecast response is not valid JSON.") from exc
        return self.parse(payload)

    @staticmethod
    def parse(payload: Any) -> list[RawForecast]:
        try:
            city = payload.get("city") or {}
            city_name = str(city.get("name") or "")
            country = str(city.get("country") or "")
            forecasts: list[RawForecast] = []
            for entry in payload["list"]:
                weather = entry["weather"][0]
                main = entry["main"]
                forecasts.append(
                    RawForecast(
                        forecast_time=datetime.fromtimestamp(int(entry["dt"]), tz=timezone.utc),
                        weather=str(weather["main"]),
                        description=str(weather.get("description") or ""),
                        temp=float(main["temp"]),
                        temp_min=float(main["temp_min"]),
                        temp_max=float(main["temp_max"]),
                        pressure=float(main["pressure"]),
                        humidity=float(main["humidity"]),
                        country=country,
                        city=city_name,
                    )
                )
        except (AttributeError, IndexError, KeyError, TypeError, ValueError, OverflowError) as exc:
            raise FetchError(f"Unexpected forecast payload: {exc!r}") from exc
        return forecasts
