import asyncio

from flower_link import FlowerLink
from models import IncomingFrame


def test_notification_becomes_stamped_frame():
    queue = asyncio.Queue(maxsize=4)
    link = FlowerLink(queue, device_name="ESP32 Flower")
    link.device_key = "ESP32 Flower"
    link.is_connected = True

    link.notification_handler(None, bytearray("Темп: 23.5°C, Влаж: 45.0%\r\n".encode("utf-8")))

    assert queue.get_nowait() == IncomingFrame("ESP32 Flower", "Темп: 23.5°C, Влаж: 45.0%", True)


def test_empty_notification_is_ignored():
    queue = asyncio.Queue(maxsize=4)
    link = FlowerLink(queue)
    link.notification_handler(None, bytearray(b"  \n"))
    assert queue.empty()


def test_invalid_utf8_is_replaced():
    assert FlowerLink.decode_notification(b"\xff\xfeOK") == "\ufffd\ufffdOK"


def test_full_queue_drops_newest_frame():
    queue = asyncio.Queue(maxsize=1)
    link = FlowerLink(queue)

    assert link.push("first") is True
    assert link.push("second") is False
    assert link.dropped == 1
    assert queue.get_nowait().text == "first"


def test_frames_carry_disconnected_identity():
    queue = asyncio.Queue(maxsize=2)
    link = FlowerLink(queue)
    link.push("Темп: 1°C")
    frame = queue.get_nowait()
    assert frame.device_key == ""
    assert frame.connected is False


def test_disconnect_updates_state():
    link = FlowerLink(asyncio.Queue())
    link.device_key = "ESP32 Flower"
    link.is_connected = True
    link._on_disconnect(client=None)
    assert link.is_connected is False
    assert link.status_message == "Соединение потеряно"
