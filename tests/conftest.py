import pytest
import datetime as dt
from src.conversations import Conversation, ConversationRegistry, MessageFactory
from src.utils.metrics import metrics


@pytest.fixture(autouse=True)
def clean_metrics():
    """Each test starts from zeroed metrics."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def tick_clock():
    """Returns a deterministic clock that advances one second per call."""
    start = dt.datetime(2025, 1, 1, 12, 0, tzinfo=dt.UTC)
    state = {"calls": 0}

    def _now():
        value = start + dt.timedelta(seconds=state["calls"])
        state["calls"] += 1
        return value
    return _now


@pytest.fixture
def message_factory(tick_clock):
    """Factory with a deterministic clock."""
    return MessageFactory(clock=tick_clock)


@pytest.fixture
def conversation(tick_clock):
    """Returns an empty support conversation."""
    return Conversation(
        "conv-1",
        "Customer Support - customer-1",
        "Billing question",
        clock=tick_clock,
    )


@pytest.fixture
def registry():
    """Returns an empty registry using the default factory."""
    return ConversationRegistry()
