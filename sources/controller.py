# controller.py
"""
Glue between the frame queue, the core (parser, evaluator, store) and the
view.  The view only needs an ``update_row(device_key, dict)`` method and
three optional callbacks the controller registers on it.
"""

import asyncio
import threading
from typing import Any, Dict, Optional

from models import IncomingFrame, MoodSignal, Reading
from frame_parser import FrameParser
from reading_store import ReadingStore
from wellbeing import ComfortBands, DEFAULT_BANDS, evaluate, recommendation
from flower_chat import FlowerChat

from app_logger import logger


class FlowerController:
    def __init__(self, store: ReadingStore, view,
                 parser: Optional[FrameParser] = None,
                 bands: ComfortBands = DEFAULT_BANDS,
                 chat: Optional[FlowerChat] = None):
        self.store = store
        self.view = view
        self.parser = parser or FrameParser()
        self.bands = bands
        self.chat = chat
        self.latest: Dict[str, Reading] = {}
        self.rows: Dict[str, Dict[str, Any]] = {}
        # rows are updated from the drain loop and from chat worker threads
        self._rows_lock = threading.Lock()
        # the controller registers itself to be notified by the view
        self.view.on_flower_name_change = self.handle_flower_name_change
        self.view.on_clear_request = self.handle_clear
        self.view.on_ask_request = self.handle_ask

    # ------------------------------------------------------------------
    # Frame pipeline
    # ------------------------------------------------------------------
    def handle_frame(self, frame: IncomingFrame) -> MoodSignal:
        """Parse, evaluate, persist and maybe compact one frame."""
        key = frame.device_key
        result = self.parser.parse_frame(frame.text)
        reading = result.reading
        mood = evaluate(reading, self.bands)

        self.store.append(key, reading, connected=frame.connected)
        if self.store.needs_compaction(key):
            self.store.compact(key)

        self.latest[key] = reading
        self._publish(key, reading, mood, frame.connected)

        logger.info(
            "from %s - T=%.1f°C, H=%.1f%%, soil=%.1f%%, light=%.1f%% (%d/4 fields) - %s",
            key or "<none>",
            reading.temperature,
            reading.humidity,
            reading.soil_moisture,
            reading.light_level,
            result.fields_recognized,
            mood.name,
        )
        return mood

    async def drain(self, queue: "asyncio.Queue[IncomingFrame]") -> None:
        """Consume frames one at a time until cancelled.  A failing frame is
        logged and skipped so later frames are still handled."""
        while True:
            frame = await queue.get()
            try:
                self.handle_frame(frame)
            except Exception:
                logger.exception("frame from %r dropped: %r",
                                 frame.device_key or "<none>", frame.text)
            finally:
                queue.task_done()

    def _update_row(self, key: str, **changes: Any) -> None:
        with self._rows_lock:
            row = dict(self.rows.get(key, {}), **changes)
            self.rows[key] = row
            self.view.update_row(key, row)

    def _publish(self, key: str, reading: Reading, mood: MoodSignal,
                 connected: bool) -> None:
        changes: Dict[str, Any] = {}
        if "name" not in self.rows.get(key, {}):
            changes["name"] = self.store.get_name(key) or ""
        changes.update({
            "temperature": reading.temperature,
            "humidity": reading.humidity,
            "soil_moisture": reading.soil_moisture,
            "light_level": reading.light_level,
            "mood": mood.name,
            "recommendation": recommendation(mood),
            "edits": self.store.edit_count(key),
            "connected": connected,
        })
        self._update_row(key, **changes)

    # ------------------------------------------------------------------
    # View callbacks
    # ------------------------------------------------------------------
    def handle_flower_name_change(self, device_key: str, new_name: str) -> None:
        self.store.set_name(device_key, new_name)
        self._update_row(device_key, name=new_name)

    def handle_clear(self, device_key: str) -> None:
        if self.store.clear(device_key) and device_key in self.rows:
            self._update_row(device_key, edits=0)

    def handle_ask(self, device_key: str) -> Optional[threading.Thread]:
        """Ask the chat endpoint in the background; the answer lands in the row."""
        reading = self.latest.get(device_key)
        if self.chat is None or reading is None:
            return None
        name = self.rows.get(device_key, {}).get("name") or "Цветок"

        def worker() -> None:
            answer = self.chat.ask(name, reading)
            self._update_row(device_key, answer=answer)

        thread = threading.Thread(target=worker, daemon=True)
        thread.start()
        return thread
