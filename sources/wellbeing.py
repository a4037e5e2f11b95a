"""
Well-being evaluator for the flower.
A reading is healthy only when every value sits inside its comfort band;
one value outside any band is enough to make the flower distressed.
"""

from dataclasses import dataclass
from typing import List, Optional

import config
from models import MoodSignal, Reading


@dataclass(frozen=True)
class ComfortBands:
    """Inclusive limits.  ``None`` means the side is unbounded."""
    temperature_min: float = config.TEMPERATURE_MIN
    temperature_max: float = config.TEMPERATURE_MAX
    humidity_min: float = config.HUMIDITY_MIN
    humidity_max: float = config.HUMIDITY_MAX
    soil_moisture_min: float = config.SOIL_MOISTURE_MIN
    soil_moisture_max: Optional[float] = None
    light_level_min: float = config.LIGHT_LEVEL_MIN
    light_level_max: float = config.LIGHT_LEVEL_MAX


DEFAULT_BANDS = ComfortBands()

RECOMMENDATIONS = {
    MoodSignal.HEALTHY: config.HEALTHY_MESSAGE,
    MoodSignal.DISTRESSED: config.DISTRESSED_MESSAGE,
}


def _within(value: float, low: Optional[float], high: Optional[float]) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def violations(reading: Reading, bands: ComfortBands = DEFAULT_BANDS) -> List[str]:
    """Names of the reading's fields that are outside their band."""
    checks = (
        ("temperature", reading.temperature, bands.temperature_min, bands.temperature_max),
        ("humidity", reading.humidity, bands.humidity_min, bands.humidity_max),
        ("soil_moisture", reading.soil_moisture, bands.soil_moisture_min, bands.soil_moisture_max),
        ("light_level", reading.light_level, bands.light_level_min, bands.light_level_max),
    )
    return [name for name, value, low, high in checks
            if not _within(value, low, high)]


def evaluate(reading: Reading, bands: ComfortBands = DEFAULT_BANDS) -> MoodSignal:
    if violations(reading, bands):
        return MoodSignal.DISTRESSED
    return MoodSignal.HEALTHY


def recommendation(mood: MoodSignal) -> str:
    """Text shown next to the flower for the given mood."""
    return RECOMMENDATIONS[mood]
