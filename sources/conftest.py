import os
import tempfile

# must happen before config / app_logger are imported by any test module
os.environ.setdefault("FLOWER_LOG_FILE",
                      os.path.join(tempfile.gettempdir(), "flower_tamagochi_test.log"))
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from flower_db import FlowerDB
from flower_files import FlowerFiles
from reading_store import ReadingStore


def make_backend(kind, tmp_path):
    if kind == "text":
        return FlowerFiles(tmp_path / "data")
    return FlowerDB(":memory:")


@pytest.fixture(params=["text", "sqlite"])
def backend_kind(request):
    return request.param


@pytest.fixture
def make_store(backend_kind, tmp_path):
    """Factory: ``make_store(block_size)`` on the parametrised backend."""
    stores = []

    def factory(block_size=10):
        store = ReadingStore(make_backend(backend_kind, tmp_path), block_size=block_size)
        stores.append(store)
        return store

    yield factory
    for store in stores:
        store.close()


@pytest.fixture
def store(make_store):
    return make_store(10)
