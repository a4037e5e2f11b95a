#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File: flower_files.py
Description:
    Low-level DAO over the legacy per-device text files.  For a device key
    ``K`` the data directory holds:

        K + "FlowerData.txt"   one "t, h, s, l" line per stored reading
        K + "DataCount.txt"    the edit counter as decimal text
        K + "FlowerName.txt"   the flower's display name

    The empty key is a valid device ("no device connected"), which gives
    the bare names "FlowerData.txt" etc.  The line format is shared with
    anything else that reads these files, so it must not change.

    Errors are not handled here: OSError propagates to the store.
"""
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from models import LogEntry
from app_logger import log_debug

DATA_SUFFIX = "FlowerData.txt"
COUNT_SUFFIX = "DataCount.txt"
NAME_SUFFIX = "FlowerName.txt"


class FlowerFiles:
    """Text-file backend of the reading store."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    # --------------------------------------------------------------
    # Paths
    # --------------------------------------------------------------
    def _path(self, device_key: str, suffix: str) -> Path:
        # a key is a peripheral name; keep it from escaping the directory
        safe_key = device_key.replace(os.sep, "_").replace("/", "_")
        return self.data_dir / (safe_key + suffix)

    def _write_atomic(self, path: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ==============================================================
    #                     LOG
    # ==============================================================

    def read_entries(self, device_key: str) -> List[LogEntry]:
        path = self._path(device_key, DATA_SUFFIX)
        if not path.exists():
            return []
        entries = []
        # undecodable bytes become U+FFFD and the line fails to parse
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            for line in fh:
                if not line.strip():
                    continue
                entry = LogEntry.from_line(line)
                if entry is None:
                    log_debug("skipping malformed line %r in %s", line, path.name)
                    continue
                entries.append(entry)
        return entries

    def append_entry(self, device_key: str, entry: LogEntry) -> None:
        with self._path(device_key, DATA_SUFFIX).open("a", encoding="utf-8") as fh:
            fh.write(entry.to_line())

    def replace_entries(self, device_key: str, entries: Iterable[LogEntry]) -> None:
        self._write_atomic(self._path(device_key, DATA_SUFFIX),
                           "".join(e.to_line() for e in entries))

    def truncate(self, device_key: str) -> None:
        self._write_atomic(self._path(device_key, DATA_SUFFIX), "")

    # ==============================================================
    #                     COUNTER & NAME
    # ==============================================================

    def read_counter(self, device_key: str) -> int:
        path = self._path(device_key, COUNT_SUFFIX)
        if not path.exists():
            return 0
        try:
            return int(path.read_text(encoding="utf-8").strip())
        except ValueError:
            return 0

    def write_counter(self, device_key: str, count: int) -> None:
        self._write_atomic(self._path(device_key, COUNT_SUFFIX), str(count))

    def read_name(self, device_key: str) -> Optional[str]:
        path = self._path(device_key, NAME_SUFFIX)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8", errors="replace")

    def write_name(self, device_key: str, name: str) -> None:
        self._write_atomic(self._path(device_key, NAME_SUFFIX), name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def list_devices(self) -> List[str]:
        keys = set()
        for suffix in (DATA_SUFFIX, COUNT_SUFFIX, NAME_SUFFIX):
            for path in self.data_dir.glob("*" + suffix):
                keys.add(path.name[: -len(suffix)])
        return sorted(keys)

    def close(self) -> None:
        """Nothing is kept open between calls."""
