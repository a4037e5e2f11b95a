import asyncio

import pytest

import config
from controller import FlowerController
from flower_files import FlowerFiles
from models import IncomingFrame, LogEntry, MoodSignal
from reading_store import ReadingStore

GOOD = "Темп: 22.4°C, Влаж: 50.0% | Почва: 40% | Свет: 50%"
COLD = "Темп: 5.0°C, Влаж: 50.0% | Почва: 40% | Свет: 50%"


class FakeView:
    def __init__(self):
        self.rows = {}
        self.updates = 0

    def update_row(self, device_key, data):
        self.rows[device_key] = data
        self.updates += 1


class FakeChat:
    def __init__(self, answer="Пить хочу!"):
        self.answer = answer
        self.calls = []

    def ask(self, flower_name, reading):
        self.calls.append((flower_name, reading))
        return self.answer


@pytest.fixture
def store(tmp_path):
    store = ReadingStore(FlowerFiles(tmp_path), block_size=3)
    yield store
    store.close()


@pytest.fixture
def view():
    return FakeView()


@pytest.fixture
def controller(store, view):
    return FlowerController(store, view, chat=FakeChat())


def test_controller_registers_view_callbacks(controller, view):
    assert view.on_flower_name_change == controller.handle_flower_name_change
    assert view.on_clear_request == controller.handle_clear
    assert view.on_ask_request == controller.handle_ask


def test_healthy_frame_flows_through(controller, store, view):
    mood = controller.handle_frame(IncomingFrame("flower-1", GOOD))

    assert mood is MoodSignal.HEALTHY
    assert store.read_all("flower-1") == [LogEntry(22, 50, 40, 50)]
    row = view.rows["flower-1"]
    assert row["temperature"] == pytest.approx(22.4)
    assert row["mood"] == "HEALTHY"
    assert row["recommendation"] == config.HEALTHY_MESSAGE
    assert row["edits"] == 1
    assert row["connected"] is True
    assert row["name"] == ""


def test_distressed_frame(controller, view):
    assert controller.handle_frame(IncomingFrame("flower-1", COLD)) is MoodSignal.DISTRESSED
    assert view.rows["flower-1"]["recommendation"] == config.DISTRESSED_MESSAGE


def test_stored_name_is_shown(controller, store, view):
    store.set_name("flower-1", "Кактус")
    controller.handle_frame(IncomingFrame("flower-1", GOOD))
    assert view.rows["flower-1"]["name"] == "Кактус"


def test_compaction_runs_when_counter_reaches_block(controller, store, view):
    for frame in (GOOD, COLD, GOOD):
        controller.handle_frame(IncomingFrame("flower-1", frame))

    # (22 + 5 + 22) // 3 == 16
    assert store.read_all("flower-1") == [LogEntry(16, 50, 40, 50)]
    assert store.edit_count("flower-1") == 0
    assert view.rows["flower-1"]["edits"] == 0


def test_garbage_while_disconnected_is_not_logged(controller, store, view):
    mood = controller.handle_frame(IncomingFrame("", "garbage", connected=False))
    assert mood is MoodSignal.DISTRESSED
    assert store.read_all("") == []
    assert view.rows[""]["connected"] is False


def test_drain_processes_frames_in_order(controller, store):
    async def scenario():
        queue = asyncio.Queue(maxsize=4)
        consumer = asyncio.create_task(controller.drain(queue))
        await queue.put(IncomingFrame("flower-1", GOOD))
        await queue.put(IncomingFrame("flower-1", COLD))
        await queue.join()
        consumer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await consumer

    asyncio.run(scenario())
    assert store.read_all("flower-1") == [LogEntry(22, 50, 40, 50), LogEntry(5, 50, 40, 50)]


def test_non_finite_frame_is_handled(controller, store, view):
    frame = "Темп: nan°C, Влаж: 45.0% | Почва: 65% | Свет: inf%"
    controller.handle_frame(IncomingFrame("flower-1", frame))

    assert store.read_all("flower-1") == [LogEntry(0, 45, 65, 0)]
    assert view.rows["flower-1"]["temperature"] == 0.0


def test_drain_survives_a_failing_frame(controller, store, monkeypatch):
    parse_frame = controller.parser.parse_frame

    def flaky(text):
        if text == "boom":
            raise RuntimeError("decoder bug")
        return parse_frame(text)

    monkeypatch.setattr(controller.parser, "parse_frame", flaky)

    async def scenario():
        queue = asyncio.Queue(maxsize=4)
        consumer = asyncio.create_task(controller.drain(queue))
        await queue.put(IncomingFrame("flower-1", "boom"))
        await queue.put(IncomingFrame("flower-1", GOOD))
        await queue.join()
        assert not consumer.done()
        consumer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await consumer

    asyncio.run(scenario())
    assert store.read_all("flower-1") == [LogEntry(22, 50, 40, 50)]


def test_rename_from_view(controller, store, view):
    view.on_flower_name_change("flower-1", "Фикус")
    assert store.get_name("flower-1") == "Фикус"
    assert view.rows["flower-1"]["name"] == "Фикус"


def test_clear_from_view(controller, store, view):
    controller.handle_frame(IncomingFrame("flower-1", GOOD))
    controller.handle_frame(IncomingFrame("flower-1", GOOD))
    view.on_clear_request("flower-1")
    assert store.read_all("flower-1") == []
    assert view.rows["flower-1"]["edits"] == 0


def test_ask_puts_answer_in_row(controller, view):
    controller.handle_frame(IncomingFrame("flower-1", GOOD))
    controller.handle_flower_name_change("flower-1", "Роза")

    thread = view.on_ask_request("flower-1")
    thread.join(timeout=5)

    assert view.rows["flower-1"]["answer"] == "Пить хочу!"
    name, reading = controller.chat.calls[0]
    assert name == "Роза"
    assert reading.temperature == pytest.approx(22.4)


def test_ask_without_reading_does_nothing(controller):
    assert controller.handle_ask("flower-1") is None
    assert controller.chat.calls == []


def test_answers_and_readings_do_not_overwrite_each_other(controller, view):
    controller.handle_frame(IncomingFrame("flower-1", GOOD))

    threads = []
    for i in range(20):
        threads.append(controller.handle_ask("flower-1"))
        controller.handle_frame(IncomingFrame("flower-1", COLD if i % 2 else GOOD))
    controller.handle_frame(IncomingFrame("flower-1", COLD))
    for thread in threads:
        thread.join(timeout=5)

    row = controller.rows["flower-1"]
    assert row["answer"] == "Пить хочу!"
    assert row["temperature"] == pytest.approx(5.0)
    assert view.rows["flower-1"] == row
