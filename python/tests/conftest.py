"""
Shared pytest fixtures for quicksilver-sdk tests.

This module provides common fixtures used across all test files,
including sample wire data, a mock HttpClient, and an in-memory
event-stream transport with a manually driven timer loop so reconnection
can be tested without sleeping.
"""

from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from quicksilver_sdk.errors import TransportError
from quicksilver_sdk.transport_sse import ReadyState


class FakeTransport:
    """In-memory EventSourceTransport driven by the test."""

    def __init__(self, url: str):
        self.url = url
        self.ready_state = ReadyState.CONNECTING
        self.on_open = None
        self.on_error = None
        self.on_event = None
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        self.ready_state = ReadyState.CLOSED

    def open(self):
        self.ready_state = ReadyState.OPEN
        self.on_open()

    def send(self, name: str, data: str):
        self.on_event(name, data)

    def fail(self, ready_state: ReadyState = ReadyState.CLOSED, error: Optional[Exception] = None):
        self.ready_state = ready_state
        self.on_error(error or TransportError("connection lost"))


class FakeTransportFactory:
    """Records every transport a StreamConnection creates."""

    def __init__(self):
        self.transports: list[FakeTransport] = []
        self.fail_next = 0

    def __call__(self, url: str) -> FakeTransport:
        if self.fail_next:
            self.fail_next -= 1
            raise OSError("cannot open transport")
        transport = FakeTransport(url)
        self.transports.append(transport)
        return transport

    @property
    def current(self) -> FakeTransport:
        return self.transports[-1]


class FakeTimer:
    def __init__(self, delay: float, callback: Callable, args: tuple):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        # Runs even when cancelled, like a callback already dequeued by the loop
        self.fired = True
        self.callback(*self.args)


class FakeLoop:
    """Stands in for the event loop's call_later."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(delay, callback, args)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_pending(self):
        for timer in self.pending:
            timer.fire()


@pytest.fixture
def transport_factory():
    """Factory producing FakeTransport instances."""
    return FakeTransportFactory()


@pytest.fixture
def fake_loop():
    """Manually fired timer loop."""
    return FakeLoop()


@pytest.fixture
def make_connection(transport_factory, fake_loop):
    """Build a StreamConnection wired to the fake transport and loop."""
    from quicksilver_sdk.connection import StreamConnection

    def _make(url="https://api.example.com/sse/streams/stream_1", api_key=None, policy=None):
        return StreamConnection(
            url,
            api_key,
            policy=policy,
            transport_factory=transport_factory,
            loop=fake_loop,
        )

    return _make


@pytest.fixture
def batch_created_body():
    """Raw batch_created frame payload."""
    return (
        '{"stream_id":"stream_1","batch_transaction_id":"tx_9",'
        '"amount":12.5,"timestamp":"2024-01-01T00:00:00Z"}'
    )


@pytest.fixture
def stream_event_body():
    """Raw stream_event frame payload."""
    return '{"stream_id":"stream_1","event_type":"paused","timestamp":"2024-01-01T00:00:00Z"}'


@pytest.fixture
def account_data():
    """Sample account as returned by the API."""
    return {
        "id": "acc_123",
        "name": "Research Agent",
        "account_type": "AgentMain",
        "parent_id": None,
        "meta": {"team": "research"},
        "limits": {"daily": 1000, "per_transaction": 100},
        "verification": {"status": "verified", "verified_at": "2025-01-01T00:00:00Z"},
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-02T00:00:00Z",
        "children": ["acc_child1"],
    }


@pytest.fixture
def transaction_data():
    """Sample transaction as returned by the API."""
    return {
        "id": "txn_123",
        "transaction_type": "Payment",
        "amount": 100,
        "currency": "USD",
        "from": "acc_sender",
        "to": "acc_receiver",
        "parent_id": "txn_parent",
        "children": ["txn_child1"],
        "state": "Draft",
        "meta": {"note": "Test transaction"},
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-02T00:00:00Z",
    }


@pytest.fixture
def streaming_transaction_data(transaction_data):
    """Sample streaming transaction."""
    return {
        "base": {**transaction_data, "id": "str_123", "transaction_type": "Stream", "state": "Executing"},
        "rate": 0.01,
        "rate_unit": "PerSecond",
        "start_time": "2025-01-01T00:00:00Z",
        "end_time": None,
        "accumulated": 3.5,
        "last_batch": "2025-01-01T00:05:00Z",
    }


@pytest.fixture
def mock_http():
    """Create a mock HttpClient for model and resource tests."""
    http = MagicMock()
    http.base_url = "https://api.example.com"
    http.api_key = "sk_test_key"
    http.get = AsyncMock()
    http.post = AsyncMock()
    http.put = AsyncMock()
    http.patch = AsyncMock()
    http.delete = AsyncMock(return_value={})
    return http
