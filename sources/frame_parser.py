#!/usr/bin/env python3
"""frame_parser.py
Decoder for the text telemetry the ESP32 flower sensor notifies, e.g.::

    Темп: 23.5°C, Влаж: 45.0% | Почва: 65% | Свет: 80%

Segments are split on ``" | "`` and each field is looked up only inside the
segment that carries it.  Decoding never raises: a field whose markers or
number are missing is reported as 0.0.  The tagged result exposes which
fields were actually found so callers and tests can tell a real zero from
a miss.
"""

import math
from dataclasses import dataclass
from typing import Optional

import config
from models import Field, ParseResult, Reading
from app_logger import log_debug


@dataclass(frozen=True)
class FrameFormat:
    """Markers used by the sensor firmware."""
    separator: str = config.SEGMENT_SEPARATOR
    temperature_prefix: str = config.TEMPERATURE_PREFIX
    temperature_suffix: str = config.TEMPERATURE_SUFFIX
    humidity_prefix: str = config.HUMIDITY_PREFIX
    humidity_suffix: str = config.HUMIDITY_SUFFIX
    soil_moisture_prefix: str = config.SOIL_MOISTURE_PREFIX
    soil_moisture_suffix: str = config.SOIL_MOISTURE_SUFFIX
    light_level_prefix: str = config.LIGHT_LEVEL_PREFIX
    light_level_suffix: str = config.LIGHT_LEVEL_SUFFIX


class FrameParser:
    """
    Stateless frame decoder.

    Parameters
    ----------
    frame_format : FrameFormat, optional
        Prefix/suffix markers.  Defaults to the firmware's Russian labels.
    """

    def __init__(self, frame_format: FrameFormat = FrameFormat()):
        self.format = frame_format

    # ------------------------------------------------------------------
    # Marker scan
    # ------------------------------------------------------------------
    @staticmethod
    def scan_value(segment: str, prefix: str, suffix: str) -> Optional[float]:
        """
        Return the number enclosed between ``prefix`` and the first
        ``suffix`` that follows it, or ``None`` if either marker is absent
        or the enclosed text is not a finite number.

        >>> FrameParser.scan_value("Темп: 23.5°C", "Темп:", "°C")
        23.5
        """
        start = segment.find(prefix)
        if start < 0:
            return None
        start += len(prefix)
        end = segment.find(suffix, start)
        if end < 0:
            return None
        try:
            value = float(segment[start:end].strip())
        except ValueError:
            return None
        # "nan", "inf" and "1e400" all parse; none of them is a measurement
        return value if math.isfinite(value) else None

    # ------------------------------------------------------------------
    # Frame decoding
    # ------------------------------------------------------------------
    def parse_frame(self, frame: str) -> ParseResult:
        """Decode ``frame`` and report which fields were recognised."""
        if not isinstance(frame, str):
            return ParseResult(Reading())

        fmt = self.format
        segments = frame.split(fmt.separator)
        # (segment index, field flag, prefix, suffix)
        layout = (
            (0, Field.TEMPERATURE, fmt.temperature_prefix, fmt.temperature_suffix),
            (0, Field.HUMIDITY, fmt.humidity_prefix, fmt.humidity_suffix),
            (1, Field.SOIL_MOISTURE, fmt.soil_moisture_prefix, fmt.soil_moisture_suffix),
            (2, Field.LIGHT_LEVEL, fmt.light_level_prefix, fmt.light_level_suffix),
        )

        values = {}
        matched = Field.NONE
        for index, field, prefix, suffix in layout:
            if index >= len(segments):
                continue
            value = self.scan_value(segments[index], prefix, suffix)
            if value is not None:
                values[field] = value
                matched |= field

        reading = Reading(
            temperature=values.get(Field.TEMPERATURE, 0.0),
            humidity=values.get(Field.HUMIDITY, 0.0),
            soil_moisture=values.get(Field.SOIL_MOISTURE, 0.0),
            light_level=values.get(Field.LIGHT_LEVEL, 0.0),
        )
        result = ParseResult(reading, matched)
        if matched != Field.ALL:
            log_debug("frame %r: %d of 4 fields recognised",
                      frame, result.fields_recognized)
        return result

    def parse(self, frame: str) -> Reading:
        return self.parse_frame(frame).reading


_default_parser = FrameParser()


def parse_frame(frame: str) -> ParseResult:
    """Module-level shortcut using the firmware's default markers."""
    return _default_parser.parse_frame(frame)


def parse(frame: str) -> Reading:
    """Decode ``frame`` into a :class:`Reading`.  Never raises."""
    return _default_parser.parse(frame)
