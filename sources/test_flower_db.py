#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""test_flower_db.py
Round trip through the SQLite backend on a real file: write a device log,
close the connection, reopen it and check everything came back.
"""

from flower_db import FlowerDB
from models import LogEntry


def test_database(tmp_path) -> None:
    db_path = tmp_path / "nested" / "flower.db"

    # --------------------------------------------------------------
    # Insert two devices with a few log entries, a counter and a name
    # --------------------------------------------------------------
    db = FlowerDB(db_path)
    for entry in (LogEntry(23, 45, 65, 80), LogEntry(24, 44, 60, 78)):
        db.append_entry("ESP32 Flower", entry)
    db.append_entry("", LogEntry(20, 40, 30, 50))
    db.write_counter("ESP32 Flower", 2)
    db.write_name("ESP32 Flower", "Фиалка")
    db.close()

    # --------------------------------------------------------------
    # Reopen and verify
    # --------------------------------------------------------------
    db = FlowerDB(db_path)
    assert db.read_entries("ESP32 Flower") == [LogEntry(23, 45, 65, 80),
                                               LogEntry(24, 44, 60, 78)]
    assert db.read_entries("") == [LogEntry(20, 40, 30, 50)]
    assert db.read_counter("ESP32 Flower") == 2
    assert db.read_counter("") == 0
    assert db.read_name("ESP32 Flower") == "Фиалка"
    assert db.read_name("") is None
    assert db.list_devices() == ["", "ESP32 Flower"]

    # --------------------------------------------------------------
    # Replace and truncate only touch the given device
    # --------------------------------------------------------------
    db.replace_entries("ESP32 Flower", [LogEntry(23, 44, 62, 79)])
    assert db.read_entries("ESP32 Flower") == [LogEntry(23, 44, 62, 79)]
    db.truncate("")
    assert db.read_entries("") == []
    assert db.read_entries("ESP32 Flower") == [LogEntry(23, 44, 62, 79)]

    # entries appended after a replace still come back in order
    db.append_entry("ESP32 Flower", LogEntry(1, 2, 3, 4))
    assert db.read_entries("ESP32 Flower")[-1] == LogEntry(1, 2, 3, 4)

    db.close()


def test_unknown_device_has_no_state() -> None:
    db = FlowerDB(":memory:")
    assert db.read_entries("ghost") == []
    assert db.read_counter("ghost") == 0
    assert db.read_name("ghost") is None
    assert db.list_devices() == []
    db.close()
