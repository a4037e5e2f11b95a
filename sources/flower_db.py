#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File: flower_db.py
Description:
    Low-level DAO (Data-Access-Object)
    SQLite backend of the reading store, the structured alternative to the
    legacy text files.  It offers the same surface as ``FlowerFiles`` so the
    store does not care which one it gets.

    Key features:
        • Automatic schema creation (device, log_entry tables)
        • Parameterised SQL statements (SQL-injection safe)
        • Foreign-key enforcement between log entries and their device
        • Append order kept by the AUTOINCREMENT ``entry_id``

    Errors are not handled here: sqlite3.Error propagates to the store.
"""
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from models import LogEntry


class FlowerDB:
    """CRUD wrapper for the device and log_entry tables."""

    def __init__(self, db_path: str | Path = "flower.db"):
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        # the store serialises per device; this lock serialises the connection
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._ensure_schema()

    # --------------------------------------------------------------
    # Schema creation
    # --------------------------------------------------------------
    def _ensure_schema(self) -> None:
        with self._lock:
            self.conn.executescript(
                """
                PRAGMA foreign_keys = ON;

                CREATE TABLE IF NOT EXISTS device (
                    device_key  TEXT PRIMARY KEY,
                    name        TEXT(256),
                    edit_count  INTEGER NOT NULL DEFAULT 0,
                    first_seen  TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS log_entry (
                    entry_id      INTEGER PRIMARY KEY AUTOINCREMENT,
                    device_key    TEXT    NOT NULL,
                    temperature   INTEGER NOT NULL,
                    humidity      INTEGER NOT NULL,
                    soil_moisture INTEGER NOT NULL,
                    light_level   INTEGER NOT NULL,
                    FOREIGN KEY(device_key) REFERENCES device(device_key)
                        ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS log_entry_device
                    ON log_entry(device_key, entry_id);
                """
            )
            self.conn.commit()

    def _ensure_device(self, device_key: str) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO device (device_key, first_seen) VALUES (?, ?);",
            (device_key, datetime.now(timezone.utc).isoformat()),
        )

    # ==============================================================
    #                     LOG
    # ==============================================================

    def read_entries(self, device_key: str) -> List[LogEntry]:
        with self._lock:
            cur = self.conn.execute(
                """
                SELECT temperature, humidity, soil_moisture, light_level
                FROM log_entry WHERE device_key = ? ORDER BY entry_id;
                """,
                (device_key,),
            )
            return [LogEntry(**{k: r[k] for k in r.keys()}) for r in cur]

    def _insert_entry(self, device_key: str, entry: LogEntry) -> None:
        self.conn.execute(
            """
            INSERT INTO log_entry
                (device_key, temperature, humidity, soil_moisture, light_level)
            VALUES (?, ?, ?, ?, ?);
            """,
            (device_key, entry.temperature, entry.humidity,
             entry.soil_moisture, entry.light_level),
        )

    def append_entry(self, device_key: str, entry: LogEntry) -> None:
        with self._lock, self.conn:
            self._ensure_device(device_key)
            self._insert_entry(device_key, entry)

    def replace_entries(self, device_key: str, entries: Iterable[LogEntry]) -> None:
        # one transaction: either the old log or the new one, never half
        with self._lock, self.conn:
            self._ensure_device(device_key)
            self.conn.execute("DELETE FROM log_entry WHERE device_key = ?;", (device_key,))
            for entry in entries:
                self._insert_entry(device_key, entry)

    def truncate(self, device_key: str) -> None:
        with self._lock, self.conn:
            self.conn.execute("DELETE FROM log_entry WHERE device_key = ?;", (device_key,))

    # ==============================================================
    #                     COUNTER & NAME
    # ==============================================================

    def _device_column(self, device_key: str, column: str):
        row = self.conn.execute(
            f"SELECT {column} FROM device WHERE device_key = ?;", (device_key,)
        ).fetchone()
        return row[column] if row else None

    def read_counter(self, device_key: str) -> int:
        with self._lock:
            return self._device_column(device_key, "edit_count") or 0

    def write_counter(self, device_key: str, count: int) -> None:
        with self._lock, self.conn:
            self._ensure_device(device_key)
            self.conn.execute(
                "UPDATE device SET edit_count = ? WHERE device_key = ?;",
                (count, device_key),
            )

    def read_name(self, device_key: str) -> Optional[str]:
        with self._lock:
            return self._device_column(device_key, "name")

    def write_name(self, device_key: str, name: str) -> None:
        with self._lock, self.conn:
            self._ensure_device(device_key)
            self.conn.execute(
                "UPDATE device SET name = ? WHERE device_key = ?;",
                (name, device_key),
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def list_devices(self) -> List[str]:
        with self._lock:
            cur = self.conn.execute("SELECT device_key FROM device ORDER BY device_key;")
            return [r["device_key"] for r in cur]

    # ------------------------------------------------------------------
    # Clean shutdown
    # ------------------------------------------------------------------
    def close(self) -> None:
        with self._lock:
            self.conn.close()
