#!/usr/bin/env python3
"""flower_link.py
BLE link to the ESP32 flower sensor, using bleak.

Connects to the peripheral advertising ``DEVICE_NAME``, subscribes to the
telemetry characteristic and turns every notification into an
:class:`IncomingFrame` stamped with the current connection identity.
Frames go into a bounded ``asyncio.Queue``; the controller drains it.

Only the link lives here.  Decoding the frame text is the parser's job.
"""
import asyncio
from typing import Optional, Union

from bleak import BleakClient, BleakScanner

import config
from models import IncomingFrame
from app_logger import logger

RECONNECT_DELAY_S = 5.0


class FlowerLink:
    """
    Parameters
    ----------
    queue : asyncio.Queue
        Bounded frame queue shared with the controller.
    device_name : str, optional
        Advertised name of the sensor.
    characteristic_uuid : str, optional
        Notify characteristic carrying the telemetry text.
    """

    def __init__(self, queue: "asyncio.Queue[IncomingFrame]",
                 device_name: str = config.DEVICE_NAME,
                 characteristic_uuid: str = config.CHARACTERISTIC_UUID):
        self.queue = queue
        self.device_name = device_name
        self.characteristic_uuid = characteristic_uuid
        self.device_key = ""
        self.is_connected = False
        self.status_message = "Не подключено"
        self.dropped = 0

    # ------------------------------------------------------------------
    # 1. Notification payload -> text
    # ------------------------------------------------------------------
    @staticmethod
    def decode_notification(data: Union[bytes, bytearray]) -> str:
        return bytes(data).decode("utf-8", errors="replace").strip()

    # ------------------------------------------------------------------
    # 2. Push into the frame queue
    # ------------------------------------------------------------------
    def push(self, text: str) -> bool:
        """Queue one frame; when the queue is full the frame is dropped."""
        frame = IncomingFrame(self.device_key, text, self.is_connected)
        try:
            self.queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("frame queue full, dropped frame from %s (%d so far)",
                           self.device_key or "<none>", self.dropped)
            return False
        return True

    def notification_handler(self, sender, data: bytearray) -> None:
        """Callback passed to ``BleakClient.start_notify``."""
        text = self.decode_notification(data)
        if text:
            self.push(text)

    def _on_disconnect(self, client: BleakClient) -> None:
        self.is_connected = False
        self.status_message = "Соединение потеряно"
        logger.warning("disconnected from %s", self.device_key)

    # ------------------------------------------------------------------
    # 3. Connection loop
    # ------------------------------------------------------------------
    async def connect_once(self) -> None:
        """Find the sensor, subscribe, and return when the link drops."""
        self.status_message = "Поиск устройства..."
        device = await BleakScanner.find_device_by_name(
            self.device_name, timeout=config.SCAN_TIMEOUT_S
        )
        if device is None:
            self.status_message = "Устройство не найдено"
            logger.info("no device named %r in range", self.device_name)
            return

        disconnected = asyncio.Event()

        def on_disconnect(client: BleakClient) -> None:
            self._on_disconnect(client)
            disconnected.set()

        async with BleakClient(device, disconnected_callback=on_disconnect) as client:
            self.device_key = device.name or device.address
            self.is_connected = True
            self.status_message = f"Подключено: {self.device_key}"
            logger.info("connected to %s [%s]", self.device_key, device.address)
            await client.start_notify(self.characteristic_uuid, self.notification_handler)
            await disconnected.wait()

    async def run(self, stop: Optional[asyncio.Event] = None) -> None:
        """Keep the link up until ``stop`` is set or the task is cancelled."""
        while stop is None or not stop.is_set():
            try:
                await self.connect_once()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # bleak raises BleakError and OSError subclasses depending on the OS
                self.is_connected = False
                self.status_message = "Ошибка соединения"
                logger.error("BLE link error: %s", exc)
            await asyncio.sleep(RECONNECT_DELAY_S)
