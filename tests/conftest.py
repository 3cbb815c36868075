import pytest

from junction_alert.storage import MemoryStore

from tests.helpers import FakeClock, RecordingAlertSink


@pytest.fixture
def alerts():
    return RecordingAlertSink()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()
