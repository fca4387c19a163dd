import pytest

from jobpayload.config import PayloadConfig


class RecordingHandle:
    def __init__(self, store, selector):
        self.store = store
        self.selector = selector

    def push_head(self, key, value):
        self.store.pushes.append((self.selector, key, value))


class RecordingStore:
    """Stands in for RedisSignalStore; remembers every push."""

    def __init__(self):
        self.pushes = []
        self.connections = []

    def connection(self, selector):
        self.connections.append(selector)
        return RecordingHandle(self, selector)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def signal_config():
    return PayloadConfig(signal_key_prefix="fq:", signals_database=3)
