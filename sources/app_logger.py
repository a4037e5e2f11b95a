# app_logger.py
"""
A small wrapper around the standard library `logging` module.
Every module imports `logger` from here, so log configuration has a
single home.  The in-memory buffer feeds the log page of the curses view.
"""

import logging
from collections import deque
from typing import Deque

import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

logger = logging.getLogger("FlowerLogger")
logger.setLevel(logging.DEBUG)         # handlers decide what they keep
logger.propagate = False               # the curses screen must stay clean

MAX_LOG_RECORDS = 200


class MemoryHandler(logging.Handler):
    """
    Keeps the newest N formatted log lines in a bounded deque.
    The view reads `handler.buffer` from its own thread.
    """
    def __init__(self, capacity: int = MAX_LOG_RECORDS):
        super().__init__()
        self.capacity = capacity
        self.buffer: Deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        self.buffer.append(self.format(record))


formatter = logging.Formatter(LOG_FORMAT)

memory_handler = MemoryHandler()
memory_handler.setLevel(config.LOG_LEVEL)
memory_handler.setFormatter(formatter)
logger.addHandler(memory_handler)

# delay=True: no file is created until the first record is written
file_handler = logging.FileHandler(config.LOG_FILE, encoding="utf-8", delay=True)
file_handler.setLevel(logging.DEBUG)
file_handler.setFormatter(formatter)
logger.addHandler(file_handler)

log_buffer = memory_handler.buffer


def log_debug(msg: str, *args, **kwargs) -> None:
    """Shortcut for `logger.debug(msg, *args, **kwargs)`."""
    logger.debug(msg, *args, **kwargs)
