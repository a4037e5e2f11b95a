#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""main.py
Companion app for the ESP32 flower sensor.  Connects over BLE, feeds every
telemetry frame through the parser, the well-being evaluator and the
reading store, and shows the result in a curses dashboard.
Every setting lives in config.py (and can be overridden from the
environment).  Run ``stats_plot.py <device>`` for the history charts.
"""

import asyncio
import curses
import threading
from typing import Tuple

import config
from models import IncomingFrame
from reading_store import ReadingStore, open_store
from curses_view import CursesView
from controller import FlowerController
from flower_chat import FlowerChat
from flower_link import FlowerLink

from app_logger import logger


def build_components(stdscr: "curses.window") -> Tuple[FlowerLink, FlowerController]:
    """
    Build the whole stack and return the link and the controller.
    """
    # 1️⃣  Frame queue shared by the link (producer) and the controller
    queue: "asyncio.Queue[IncomingFrame]" = asyncio.Queue(maxsize=config.FRAME_QUEUE_SIZE)

    # 2️⃣  Persistence layer
    store: ReadingStore = open_store(config.STORE_BACKEND, config.COMPACTION_BLOCK_SIZE)

    # 3️⃣  BLE link
    link = FlowerLink(queue, device_name=config.DEVICE_NAME,
                      characteristic_uuid=config.CHARACTERISTIC_UUID)

    # 4️⃣  UI layer (curses)
    view = CursesView(stdscr, link=link)

    # 5️⃣  Controller - glues store + view
    controller = FlowerController(store, view, chat=FlowerChat())
    return link, controller


async def run(stdscr: "curses.window") -> None:
    link, controller = build_components(stdscr)

    # curses blocks, so the UI loop gets its own thread
    ui_thread = threading.Thread(target=controller.view.run, daemon=True)
    ui_thread.start()

    logger.info("looking for %r (store: %s)", config.DEVICE_NAME, config.STORE_BACKEND)
    consumer = asyncio.create_task(controller.drain(link.queue))
    try:
        await link.run()
    finally:
        consumer.cancel()
        controller.store.close()


def main(stdscr: "curses.window") -> None:
    try:
        asyncio.run(run(stdscr))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    # ``curses.wrapper`` takes care of terminal init / teardown.
    curses.wrapper(main)
    print("Program terminated by user.")
