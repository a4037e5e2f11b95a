# models.py
"""
Dataclasses shared by the parser, the evaluator and the store.
They are deliberately small: one reading, one persisted log line, and
the frame envelope that travels through the frame queue.
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Optional


class Field(IntFlag):
    """Bit per sensor value, used to report which fields a frame carried."""
    NONE = 0
    TEMPERATURE = 1
    HUMIDITY = 2
    SOIL_MOISTURE = 4
    LIGHT_LEVEL = 8
    ALL = 15


class MoodSignal(Enum):
    HEALTHY = "healthy"
    DISTRESSED = "distressed"


@dataclass(frozen=True)
class Reading:
    """One decoded telemetry frame.  0.0 stands for "not reported"."""
    temperature: float = 0.0
    humidity: float = 0.0
    soil_moisture: float = 0.0
    light_level: float = 0.0


@dataclass(frozen=True)
class ParseResult:
    reading: Reading
    matched: Field = Field.NONE

    @property
    def fields_recognized(self) -> int:
        return bin(int(self.matched)).count("1")


@dataclass(frozen=True)
class LogEntry:
    """One line of a device log: four integers, no timestamp."""
    temperature: int
    humidity: int
    soil_moisture: int
    light_level: int

    @classmethod
    def from_reading(cls, reading: Reading) -> "LogEntry":
        # int() truncates toward zero, which is what the legacy app stored
        return cls(
            temperature=int(reading.temperature),
            humidity=int(reading.humidity),
            soil_moisture=int(reading.soil_moisture),
            light_level=int(reading.light_level),
        )

    @classmethod
    def from_line(cls, line: str) -> Optional["LogEntry"]:
        """
        Parse one stored line, e.g. ``"23, 45, 65, 80"``.

        Returns ``None`` for anything that is not exactly four integers.
        """
        parts = [p.strip() for p in line.split(",")]
        if len(parts) != 4:
            return None
        try:
            return cls(*(int(p) for p in parts))
        except ValueError:
            return None

    def to_line(self) -> str:
        return (f"{self.temperature}, {self.humidity}, "
                f"{self.soil_moisture}, {self.light_level}\n")

    def is_plausible(self) -> bool:
        """True when every value sits strictly inside the sensor's range."""
        return (0 < self.temperature < 50
                and 0 < self.humidity < 100
                and 0 < self.soil_moisture < 100
                and 0 < self.light_level < 100)


@dataclass(frozen=True)
class IncomingFrame:
    """A raw frame stamped with the connection identity at receipt time."""
    device_key: str
    text: str
    connected: bool = True
