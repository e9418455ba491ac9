"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, status
from fastapi.responses import PlainTextResponse

from app.schemas import MAX_SENSOR_ID, ForecastEventOut, GardenReading
from datastore.errors import ValidationError
from services.decision import DecisionError
from services.garden import GardenService, build_default_service

router = APIRouter()

WELCOME_MESSAGE = "Welcome to SmartGarden"


def get_service() -> GardenService:
    return build_default_service()


@router.get(
    "/",
    summary="Welcome banner.",
    response_class=PlainTextResponse,
)
def root() -> str:
    return WELCOME_MESSAGE


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post(
    "/log",
    summary="Record a moisture reading from a sensor.",
    response_class=PlainTextResponse,
)
def log_reading(
    reading: GardenReading,
    service: GardenService = Depends(get_service),
) -> str:
    try:
        stored = service.log_reading(reading.sensor_id, reading.moisture_content)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return f"sensor #{stored.sensor_id} has moisture content {stored.moisture_content}"


@router.get(
    "/can-i-water/{sensor_id}",
    summary="Decide whether the sensor's zone should be watered now.",
    response_class=PlainTextResponse,
)
def can_i_water(
    sensor_id: int = Path(..., ge=0, le=MAX_SENSOR_ID),
    service: GardenService = Depends(get_service),
) -> str:
    try:
        decision = service.can_i_water(sensor_id)
    except DecisionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return "yes" if decision else "no"


@router.get(
    "/forecast",
    response_model=list[ForecastEventOut],
    summary="Events of the most recent forecast batch.",
)
def current_forecast(
    service: GardenService = Depends(get_service),
) -> list[ForecastEventOut]:
    return [ForecastEventOut.model_validate(event) for event in service.current_forecast()]
