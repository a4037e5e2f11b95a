# reading_store.py
"""
Higher-level service the controller depends on.
It knows *what* to keep per device (log, edit counter, flower name) and
*when* to compact, not *how* the backend stores it.
"""

import sqlite3
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import config
from models import LogEntry, Reading
from flower_db import FlowerDB
from flower_files import FlowerFiles
from timing_decorator import timed

from app_logger import logger, log_debug

# what a backend may raise; anything else is a bug and propagates.
# sqlite3 raises OverflowError for integers wider than 64 bits.
STORAGE_ERRORS = (OSError, sqlite3.Error, OverflowError)


@dataclass
class DeviceHandle:
    """Per-device state the store keeps in memory."""
    device_key: str
    lock: threading.Lock = field(default_factory=threading.Lock)
    edit_count: Optional[int] = None        # loaded from the backend on first use


class ReadingStore:
    """
    Public API used by the controller (or any other component) to persist
    readings.

    Parameters
    ----------
    backend : FlowerFiles | FlowerDB
        Storage DAO.  Both expose the same methods.
    block_size : int, optional
        Edit count that triggers compaction, and the number of trailing
        entries averaged by it.
    """

    def __init__(self, backend, block_size: int = config.COMPACTION_BLOCK_SIZE):
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        self.backend = backend
        self.block_size = block_size
        self.device_map: Dict[str, DeviceHandle] = {}
        self._map_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Device handles
    # ------------------------------------------------------------------
    def _handle(self, device_key: str) -> DeviceHandle:
        with self._map_lock:
            handle = self.device_map.get(device_key)
            if handle is None:
                handle = DeviceHandle(device_key=device_key)
                self.device_map[device_key] = handle
            return handle

    def _count(self, handle: DeviceHandle) -> int:
        """Caller holds ``handle.lock``."""
        if handle.edit_count is None:
            try:
                handle.edit_count = self.backend.read_counter(handle.device_key)
            except STORAGE_ERRORS as exc:
                logger.error("cannot read edit counter of %r: %s", handle.device_key, exc)
                handle.edit_count = 0
        return handle.edit_count

    def _store_count(self, handle: DeviceHandle, count: int) -> None:
        """Caller holds ``handle.lock``.  The in-memory value wins on failure."""
        handle.edit_count = count
        try:
            self.backend.write_counter(handle.device_key, count)
        except STORAGE_ERRORS as exc:
            logger.error("cannot persist edit counter of %r: %s", handle.device_key, exc)

    # ------------------------------------------------------------------
    # Log operations
    # ------------------------------------------------------------------
    def append(self, device_key: str, reading: Reading,
               connected: Optional[bool] = None) -> bool:
        """
        Store one reading as a truncated-integer log line.

        Parameters
        ----------
        device_key : str
            Identity of the sensor; ``""`` when no device is connected.
        reading : Reading
            Decoded values.
        connected : bool, optional
            Connection flag; defaults to ``bool(device_key)``.  While
            disconnected only plausible readings are kept, so zeroed frames
            do not pollute the log.

        Returns
        -------
        bool
            ``True`` if a line was written.
        """
        if connected is None:
            connected = bool(device_key)
        try:
            entry = LogEntry.from_reading(reading)
        except (ValueError, OverflowError):
            logger.warning("dropping non-finite reading %s for %r", reading, device_key)
            return False
        if not connected and not entry.is_plausible():
            log_debug("dropping implausible reading %s while disconnected", entry)
            return False

        handle = self._handle(device_key)
        with handle.lock:
            count = self._count(handle)
            try:
                self.backend.append_entry(device_key, entry)
            except STORAGE_ERRORS as exc:
                logger.error("append to %r failed, reading lost: %s", device_key, exc)
                return False
            self._store_count(handle, count + 1)
        return True

    @timed("ReadingStore.read_all")
    def read_all(self, device_key: str) -> List[LogEntry]:
        """Every entry of the device in append order; empty if there is none."""
        try:
            return self.backend.read_entries(device_key)
        except STORAGE_ERRORS as exc:
            logger.error("cannot read log of %r: %s", device_key, exc)
            return []

    @timed("ReadingStore.compact")
    def compact(self, device_key: str, block_size: Optional[int] = None) -> Optional[LogEntry]:
        """
        Replace the whole log with the floor mean of its last ``block_size``
        entries and reset the edit counter.

        Older entries are dropped, not averaged in.  With fewer than
        ``block_size`` entries nothing changes and ``None`` is returned.
        """
        if block_size is None:
            block_size = self.block_size
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        handle = self._handle(device_key)
        with handle.lock:
            try:
                entries = self.backend.read_entries(device_key)
                if len(entries) < block_size:
                    logger.info("not enough data to compact %r: %d of %d entries",
                                device_key, len(entries), block_size)
                    return None
                block = entries[-block_size:]
                averaged = LogEntry(
                    temperature=sum(e.temperature for e in block) // block_size,
                    humidity=sum(e.humidity for e in block) // block_size,
                    soil_moisture=sum(e.soil_moisture for e in block) // block_size,
                    light_level=sum(e.light_level for e in block) // block_size,
                )
                self.backend.replace_entries(device_key, [averaged])
            except STORAGE_ERRORS as exc:
                logger.error("compaction of %r failed: %s", device_key, exc)
                return None
            self._store_count(handle, 0)

        logger.info("compacted %r: %d entries -> %s", device_key, len(entries),
                    averaged.to_line().strip())
        return averaged

    def clear(self, device_key: str) -> bool:
        """Empty the log and reset the edit counter.  User action only."""
        handle = self._handle(device_key)
        with handle.lock:
            try:
                self.backend.truncate(device_key)
            except STORAGE_ERRORS as exc:
                logger.error("cannot clear log of %r: %s", device_key, exc)
                return False
            self._store_count(handle, 0)
        logger.info("cleared log of %r", device_key)
        return True

    # ------------------------------------------------------------------
    # Counter, name, lookup
    # ------------------------------------------------------------------
    def edit_count(self, device_key: str) -> int:
        handle = self._handle(device_key)
        with handle.lock:
            return self._count(handle)

    def needs_compaction(self, device_key: str) -> bool:
        return self.edit_count(device_key) >= self.block_size

    def get_name(self, device_key: str) -> Optional[str]:
        try:
            return self.backend.read_name(device_key)
        except STORAGE_ERRORS as exc:
            logger.error("cannot read flower name of %r: %s", device_key, exc)
            return None

    def set_name(self, device_key: str, name: str) -> None:
        try:
            self.backend.write_name(device_key, name)
        except STORAGE_ERRORS as exc:
            logger.error("cannot store flower name of %r: %s", device_key, exc)

    def list_devices(self) -> List[str]:
        try:
            return self.backend.list_devices()
        except STORAGE_ERRORS as exc:
            logger.error("cannot list devices: %s", exc)
            return []

    def close(self) -> None:
        self.backend.close()


def open_store(backend: str = config.STORE_BACKEND,
               block_size: int = config.COMPACTION_BLOCK_SIZE) -> ReadingStore:
    """Build a store on the configured backend (``"text"`` or ``"sqlite"``)."""
    if backend == "text":
        return ReadingStore(FlowerFiles(config.DATA_DIR), block_size)
    if backend == "sqlite":
        return ReadingStore(FlowerDB(config.DB_FILE), block_size)
    raise ValueError(f"unknown store backend {backend!r}")
