"""Moisture tier classification."""

from __future__ import annotations

from models.records import MoistureTier

PLENTY_ABOVE = 25
CRITICAL_AT_OR_BELOW = 10


def classify(moisture_content: int) -> MoistureTier:
    if moisture_content > PLENTY_ABOVE:
        return MoistureTier.plenty
    if moisture_content > CRITICAL_AT_OR_BELOW:
        return MoistureTier.low
    return MoistureTier.critical
