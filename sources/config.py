# config.py
"""
Every tunable of the companion app lives here.  Values are plain module
constants; each one can be overridden from the environment so a deployment
never has to edit the source.
"""

import logging
import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


# ----------------------------------------------------------------------
# Storage
# ----------------------------------------------------------------------
DATA_DIR = Path(os.environ.get("FLOWER_DATA_DIR", Path.home() / "flower_tamagochi"))
STORE_BACKEND = os.environ.get("FLOWER_STORE_BACKEND", "text")   # "text" or "sqlite"
DB_FILE = Path(os.environ.get("FLOWER_DB_FILE", DATA_DIR / "flower.db"))

# Older firmware builds compacted every 10 appends; the final one uses 10 000.
COMPACTION_BLOCK_SIZE = _env_int("FLOWER_COMPACTION_BLOCK_SIZE", 10000)

# ----------------------------------------------------------------------
# Comfort bands (inclusive)
# ----------------------------------------------------------------------
TEMPERATURE_MIN = _env_float("FLOWER_TEMPERATURE_MIN", 15.0)
TEMPERATURE_MAX = _env_float("FLOWER_TEMPERATURE_MAX", 30.0)
HUMIDITY_MIN = _env_float("FLOWER_HUMIDITY_MIN", 20.0)
HUMIDITY_MAX = _env_float("FLOWER_HUMIDITY_MAX", 80.0)
SOIL_MOISTURE_MIN = _env_float("FLOWER_SOIL_MOISTURE_MIN", 20.0)
LIGHT_LEVEL_MIN = _env_float("FLOWER_LIGHT_LEVEL_MIN", 20.0)
LIGHT_LEVEL_MAX = _env_float("FLOWER_LIGHT_LEVEL_MAX", 80.0)

HEALTHY_MESSAGE = os.environ.get("FLOWER_HEALTHY_MESSAGE", "Все хорошо!")
DISTRESSED_MESSAGE = os.environ.get("FLOWER_DISTRESSED_MESSAGE", "Спаси меня!")

# ----------------------------------------------------------------------
# Frame markers, as printed by the ESP32 sketch
# ----------------------------------------------------------------------
SEGMENT_SEPARATOR = " | "
TEMPERATURE_PREFIX = "Темп:"
TEMPERATURE_SUFFIX = "°C"
HUMIDITY_PREFIX = "Влаж:"
HUMIDITY_SUFFIX = "%"
SOIL_MOISTURE_PREFIX = "Почва:"
SOIL_MOISTURE_SUFFIX = "%"
LIGHT_LEVEL_PREFIX = "Свет:"
LIGHT_LEVEL_SUFFIX = "%"

# ----------------------------------------------------------------------
# BLE link
# ----------------------------------------------------------------------
DEVICE_NAME = os.environ.get("FLOWER_DEVICE_NAME", "ESP32 Flower")
CHARACTERISTIC_UUID = os.environ.get(
    "FLOWER_CHARACTERISTIC_UUID", "beb5483e-36e1-4688-b7f5-ea07361b26a8"
)
SCAN_TIMEOUT_S = _env_float("FLOWER_SCAN_TIMEOUT_S", 10.0)
FRAME_QUEUE_SIZE = _env_int("FLOWER_FRAME_QUEUE_SIZE", 64)

# ----------------------------------------------------------------------
# Logging
# ----------------------------------------------------------------------
LOG_FILE = Path(os.environ.get("FLOWER_LOG_FILE", "flower_tamagochi.log"))
LOG_LEVEL = getattr(logging, os.environ.get("FLOWER_LOG_LEVEL", "INFO").upper(), logging.INFO)

# ----------------------------------------------------------------------
# "Ask the flower" chat completion
# ----------------------------------------------------------------------
CHAT_API_URL = os.environ.get(
    "FLOWER_CHAT_API_URL", "https://router.huggingface.co/v1/chat/completions"
)
CHAT_MODEL = os.environ.get("FLOWER_CHAT_MODEL", "deepseek-ai/DeepSeek-V3.2-Exp:novita")
CHAT_API_TOKEN = os.environ.get("CHAT_API_TOKEN", "")
CHAT_TIMEOUT_S = _env_float("FLOWER_CHAT_TIMEOUT_S", 30.0)

# ----------------------------------------------------------------------
# Statistics view
# ----------------------------------------------------------------------
STATS_INTERVAL_MS = _env_int("FLOWER_STATS_INTERVAL_MS", 2000)
