"""
Tests for StreamConnection: listener dispatch, payload decoding,
backoff-driven reconnection and shutdown.
"""

import asyncio
import json
import logging

import pytest

from quicksilver_sdk.connection import StreamConnection
from quicksilver_sdk.errors import (
    ReconnectExhaustedError,
    StreamError,
    StreamParseError,
    TransportError,
)
from quicksilver_sdk.transport_sse import ReadyState
from quicksilver_sdk.types import ReconnectPolicy


STREAM_URL = "https://api.example.com/sse/streams/stream_1"


def collect(connection, category):
    received = []
    connection.on(category, lambda *args: received.append(args[0] if args else None))
    return received


class TestConstruction:
    """Tests for opening a connection."""

    def test_opens_transport_immediately(self, make_connection, transport_factory):
        """Test that the transport is created before the constructor returns."""
        connection = make_connection()

        assert len(transport_factory.transports) == 1
        assert transport_factory.current.url == STREAM_URL
        assert connection.url == STREAM_URL

    def test_api_key_appended_as_query_parameter(self, make_connection, transport_factory):
        """Test that the credential is carried in the api_key parameter."""
        connection = make_connection(api_key="k1")

        assert connection.url == STREAM_URL + "?api_key=k1"
        assert transport_factory.current.url == STREAM_URL + "?api_key=k1"

    def test_api_key_kept_with_existing_query(self, make_connection):
        """Test that existing query parameters are preserved."""
        connection = make_connection(url=STREAM_URL + "?from=cursor_1", api_key="k1")

        assert connection.url == STREAM_URL + "?from=cursor_1&api_key=k1"

    def test_no_api_key_keeps_url_unchanged(self, make_connection):
        """Test that the URL is used as-is without a credential."""
        connection = make_connection(api_key=None)

        assert connection.url == STREAM_URL

    def test_ready_state_follows_transport(self, make_connection, transport_factory):
        """Test that ready_state reports the current transport's state."""
        connection = make_connection()
        assert connection.ready_state == ReadyState.CONNECTING

        transport_factory.current.open()
        assert connection.ready_state == ReadyState.OPEN

    def test_policy_defaults(self, make_connection):
        """Test the default reconnection settings."""
        connection = make_connection()

        assert connection.max_reconnect_attempts == 5
        assert connection.reconnect_delay == 1.0
        assert connection.reconnect_attempts == 0
        assert connection.closed is False

    def test_repr_hides_api_key(self, make_connection):
        """Test that repr never exposes the credential."""
        connection = make_connection(api_key="secret_key")

        assert "secret_key" not in repr(connection)
        assert "CONNECTING" in repr(connection)


class TestListeners:
    """Tests for the category listener registry."""

    def test_batch_created_payload_delivered(self, make_connection, transport_factory, batch_created_body):
        """Test that a batch_created frame reaches its listener decoded."""
        connection = make_connection()
        received = collect(connection, "batch_created")

        transport_factory.current.send("batch_created", batch_created_body)

        assert received == [{
            "stream_id": "stream_1",
            "batch_transaction_id": "tx_9",
            "amount": 12.5,
            "timestamp": "2024-01-01T00:00:00Z",
        }]

    def test_websocket_style_url(self, make_connection, transport_factory, batch_created_body):
        """Test a wss:// subscription URL with a credential."""
        connection = make_connection(url="wss://host/sse/streams/stream_1", api_key="k1")
        received = collect(connection, "batch_created")

        transport_factory.current.send("batch_created", batch_created_body)

        assert connection.url == "wss://host/sse/streams/stream_1?api_key=k1"
        assert received[0]["amount"] == 12.5

    def test_stream_event_payload_delivered(self, make_connection, transport_factory, stream_event_body):
        """Test that stream lifecycle frames are decoded."""
        connection = make_connection()
        received = collect(connection, "stream_event")

        transport_factory.current.send("stream_event", stream_event_body)

        assert received[0]["event_type"] == "paused"

    def test_custom_event_name_passes_through(self, make_connection, transport_factory):
        """Test that unknown event names are emitted under their own name."""
        connection = make_connection()
        received = collect(connection, "balance_changed")

        transport_factory.current.send("balance_changed", '{"balance": 42}')

        assert received == [{"balance": 42}]

    def test_custom_event_falls_back_to_raw_text(self, make_connection, transport_factory):
        """Test that unknown event names with non-JSON payloads are delivered as text."""
        connection = make_connection()
        received = collect(connection, "balance_changed")
        errors = collect(connection, "error")

        transport_factory.current.send("balance_changed", "not-json")

        assert received == ["not-json"]
        assert errors == []

    def test_stream_event_stays_strict(self, make_connection, transport_factory):
        """Test that known categories still report invalid JSON as an error."""
        connection = make_connection()
        events = collect(connection, "stream_event")
        errors = collect(connection, "error")

        transport_factory.current.send("stream_event", "not-json")

        assert events == []
        assert isinstance(errors[0], StreamParseError)
        assert errors[0].event == "stream_event"

    def test_message_json_decoded(self, make_connection, transport_factory):
        """Test that unnamed frames with JSON payloads are decoded."""
        connection = make_connection()
        received = collect(connection, "message")

        transport_factory.current.send("message", '{"hello": "world"}')

        assert received == [{"hello": "world"}]

    def test_message_falls_back_to_raw_text(self, make_connection, transport_factory):
        """Test that unnamed frames that are not JSON are delivered as text."""
        connection = make_connection()
        received = collect(connection, "message")
        errors = collect(connection, "error")

        transport_factory.current.send("message", "keepalive")

        assert received == ["keepalive"]
        assert errors == []

    def test_malformed_named_frame_reports_parse_error(self, make_connection, transport_factory):
        """Test that an undecodable named frame becomes an error event only."""
        connection = make_connection()
        batches = collect(connection, "batch_created")
        errors = collect(connection, "error")

        transport_factory.current.send("batch_created", "{not json")

        assert batches == []
        assert len(errors) == 1
        assert isinstance(errors[0], StreamParseError)
        assert errors[0].event == "batch_created"
        assert errors[0].data == "{not json"
        assert "Failed to parse batch_created" in str(errors[0])
        assert isinstance(errors[0].__cause__, json.JSONDecodeError)

    def test_parse_error_does_not_reconnect(self, make_connection, transport_factory, fake_loop):
        """Test that a bad frame leaves the connection alone."""
        connection = make_connection()
        collect(connection, "error")

        transport_factory.current.send("stream_event", "oops")

        assert fake_loop.timers == []
        assert len(transport_factory.transports) == 1

    def test_listeners_called_in_registration_order(self, make_connection, transport_factory):
        """Test dispatch order for one category."""
        connection = make_connection()
        calls = []
        connection.on("stream_event", lambda data: calls.append("first"))
        connection.on("stream_event", lambda data: calls.append("second"))

        transport_factory.current.send("stream_event", "{}")

        assert calls == ["first", "second"]

    def test_on_returns_connection_for_chaining(self, make_connection):
        """Test that on() can be chained."""
        connection = make_connection()

        result = connection.on("open", lambda: None).on("error", lambda error: None)

        assert result is connection
        assert connection.listener_count("open") == 1
        assert connection.listener_count("error") == 1

    def test_off_removes_listener(self, make_connection, transport_factory):
        """Test that a removed listener is no longer called."""
        connection = make_connection()
        calls = []

        def listener(data):
            calls.append(data)

        connection.on("stream_event", listener)
        connection.off("stream_event", listener)
        connection.off("stream_event", listener)
        transport_factory.current.send("stream_event", "{}")

        assert calls == []
        assert connection.listener_count("stream_event") == 0

    def test_listener_added_during_dispatch_runs_next_frame(self, make_connection, transport_factory):
        """Test that registration during dispatch applies from the next frame."""
        connection = make_connection()
        late_calls = []

        def add_late(data):
            if connection.listener_count("stream_event") == 1:
                connection.on("stream_event", lambda d: late_calls.append(d))

        connection.on("stream_event", add_late)

        transport_factory.current.send("stream_event", '{"n": 1}')
        assert late_calls == []

        transport_factory.current.send("stream_event", '{"n": 2}')
        assert late_calls == [{"n": 2}]

    def test_failing_listener_does_not_block_others(self, make_connection, transport_factory, caplog):
        """Test that a listener exception is logged and dispatch continues."""
        connection = make_connection()
        received = []

        def broken(data):
            raise RuntimeError("listener bug")

        connection.on("batch_created", broken)
        connection.on("batch_created", received.append)

        with caplog.at_level(logging.ERROR, logger="quicksilver_sdk.connection"):
            transport_factory.current.send("batch_created", '{"amount": 1}')

        assert received == [{"amount": 1}]
        assert "Error in batch_created listener" in caplog.text

    def test_unhandled_error_is_logged(self, make_connection, transport_factory, caplog):
        """Test that errors without listeners are logged as warnings."""
        make_connection(api_key="secret_key")

        with caplog.at_level(logging.WARNING, logger="quicksilver_sdk.connection"):
            transport_factory.current.fail(ReadyState.OPEN)

        assert "Unhandled error on event stream" in caplog.text
        assert "secret_key" not in caplog.text

    def test_open_emitted(self, make_connection, transport_factory):
        """Test that the open category fires without payload."""
        connection = make_connection()
        opened = collect(connection, "open")

        transport_factory.current.open()

        assert opened == [None]


class TestReconnection:
    """Tests for backoff-driven reconnection."""

    def test_transient_error_does_not_reconnect(self, make_connection, transport_factory, fake_loop):
        """Test that an error on a still-connecting transport only emits."""
        connection = make_connection()
        errors = collect(connection, "error")

        transport_factory.current.fail(ReadyState.CONNECTING)

        assert len(errors) == 1
        assert isinstance(errors[0], TransportError)
        assert fake_loop.timers == []
        assert connection.reconnect_attempts == 0

    def test_closed_transport_schedules_reconnect(self, make_connection, transport_factory, fake_loop):
        """Test that a definitive close schedules one attempt."""
        connection = make_connection(api_key="k1")
        errors = collect(connection, "error")

        transport_factory.current.fail()

        assert len(errors) == 1
        assert len(fake_loop.pending) == 1
        assert fake_loop.pending[0].delay == 1.0
        assert connection.reconnect_attempts == 1
        assert connection.reconnect_delay == 2.0

        first = transport_factory.current
        fake_loop.fire_pending()

        assert len(transport_factory.transports) == 2
        assert first.close_calls >= 1
        assert transport_factory.current.url == STREAM_URL + "?api_key=k1"

    def test_only_one_attempt_in_flight(self, make_connection, transport_factory, fake_loop):
        """Test that repeated errors before the timer fires schedule nothing more."""
        connection = make_connection()
        errors = collect(connection, "error")

        transport_factory.current.fail()
        transport_factory.current.fail()

        assert len(errors) == 2
        assert len(fake_loop.pending) == 1
        assert connection.reconnect_attempts == 1

    def test_backoff_doubles_up_to_ceiling(self, make_connection, transport_factory, fake_loop):
        """Test the delay sequence for consecutive failures."""
        connection = make_connection(policy=ReconnectPolicy(max_attempts=10))
        collect(connection, "error")

        delays = []
        for _ in range(10):
            transport_factory.current.fail()
            timer = fake_loop.pending[0]
            delays.append(timer.delay)
            timer.fire()

        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0, 30.0, 30.0, 30.0]

    def test_custom_policy_delays(self, make_connection, transport_factory, fake_loop):
        """Test that the policy controls initial delay and ceiling."""
        policy = ReconnectPolicy(max_attempts=4, initial_delay=0.5, max_delay=1.5)
        connection = make_connection(policy=policy)
        collect(connection, "error")

        delays = []
        for _ in range(4):
            transport_factory.current.fail()
            timer = fake_loop.pending[0]
            delays.append(timer.delay)
            timer.fire()

        assert delays == [0.5, 1.0, 1.5, 1.5]

    def test_successful_open_resets_backoff(self, make_connection, transport_factory, fake_loop):
        """Test that opening resets the attempt count and delay."""
        connection = make_connection()
        collect(connection, "error")

        for _ in range(3):
            transport_factory.current.fail()
            fake_loop.pending[0].fire()
        assert connection.reconnect_attempts == 3
        assert connection.reconnect_delay == 8.0

        transport_factory.current.open()
        assert connection.reconnect_attempts == 0
        assert connection.reconnect_delay == 1.0

        transport_factory.current.fail()
        assert fake_loop.pending[0].delay == 1.0
        assert connection.reconnect_attempts == 1

    def test_exhaustion_reported_once(self, make_connection, transport_factory, fake_loop):
        """Test that the attempt budget ends reconnection with one error."""
        connection = make_connection()
        errors = collect(connection, "error")

        for _ in range(5):
            transport_factory.current.fail()
            fake_loop.pending[0].fire()
        assert len(transport_factory.transports) == 6

        transport_factory.current.fail()
        transport_factory.current.fail()

        exhausted = [e for e in errors if isinstance(e, ReconnectExhaustedError)]
        assert len(exhausted) == 1
        assert str(exhausted[0]) == "Max reconnection attempts reached"
        assert exhausted[0].attempts == 5
        assert fake_loop.pending == []
        assert len(transport_factory.transports) == 6
        assert connection.reconnect_attempts == 5

    def test_exhaustion_is_logged(self, make_connection, transport_factory, caplog):
        """Test that giving up is logged as a warning."""
        connection = make_connection(policy=ReconnectPolicy(max_attempts=0))
        collect(connection, "error")

        with caplog.at_level(logging.WARNING, logger="quicksilver_sdk.connection"):
            transport_factory.current.fail()

        assert "Giving up on event stream" in caplog.text

    def test_zero_attempts_exhausts_immediately(self, make_connection, transport_factory, fake_loop):
        """Test a connection that never reconnects."""
        connection = make_connection()
        connection.set_max_reconnect_attempts(0)
        errors = collect(connection, "error")

        transport_factory.current.fail()

        assert isinstance(errors[0], TransportError)
        assert isinstance(errors[1], ReconnectExhaustedError)
        assert fake_loop.timers == []

    def test_listeners_survive_reconnection(
        self, make_connection, transport_factory, fake_loop, batch_created_body
    ):
        """Test that listeners keep receiving frames after a reconnect."""
        connection = make_connection()
        collect(connection, "error")
        received = collect(connection, "batch_created")

        transport_factory.current.fail()
        fake_loop.fire_pending()
        transport_factory.current.open()
        transport_factory.current.send("batch_created", batch_created_body)

        assert len(received) == 1
        assert received[0]["batch_transaction_id"] == "tx_9"

    def test_stale_transport_is_ignored(
        self, make_connection, transport_factory, fake_loop, batch_created_body
    ):
        """Test that callbacks from a replaced transport are dropped."""
        connection = make_connection()
        errors = collect(connection, "error")
        received = collect(connection, "batch_created")
        opened = collect(connection, "open")

        old = transport_factory.current
        old.fail()
        fake_loop.fire_pending()

        old.on_event("batch_created", batch_created_body)
        old.on_open()
        old.on_error(TransportError("late"))

        assert received == []
        assert opened == []
        assert len(errors) == 1
        assert fake_loop.pending == []

    def test_factory_failure_retries_with_backoff(self, make_connection, transport_factory, fake_loop):
        """Test that a transport that cannot be built counts as a failed attempt."""
        connection = make_connection()
        errors = collect(connection, "error")

        transport_factory.current.fail()
        transport_factory.fail_next = 1
        fake_loop.pending[0].fire()

        assert isinstance(errors[-1], StreamError)
        assert "Reconnection failed" in str(errors[-1])
        assert isinstance(errors[-1].__cause__, OSError)
        assert len(fake_loop.pending) == 1
        assert fake_loop.pending[0].delay == 2.0
        assert connection.reconnect_attempts == 2

        fake_loop.pending[0].fire()
        assert len(transport_factory.transports) == 2

    def test_set_reconnect_delay_applies_to_next_attempt(self, make_connection, transport_factory, fake_loop):
        """Test that changing the delay does not touch a scheduled attempt."""
        connection = make_connection()
        collect(connection, "error")

        transport_factory.current.fail()
        connection.set_reconnect_delay(5.0)
        assert fake_loop.pending[0].delay == 1.0

        fake_loop.pending[0].fire()
        transport_factory.current.fail()
        assert fake_loop.pending[0].delay == 5.0

        fake_loop.pending[0].fire()
        transport_factory.current.open()
        assert connection.reconnect_delay == 5.0

    def test_setters_validate(self, make_connection):
        """Test that invalid settings are rejected."""
        connection = make_connection()

        with pytest.raises(ValueError):
            connection.set_max_reconnect_attempts(-1)
        with pytest.raises(ValueError):
            connection.set_reconnect_delay(0)

        connection.set_max_reconnect_attempts(2)
        assert connection.max_reconnect_attempts == 2


class TestClose:
    """Tests for shutting a connection down."""

    def test_close_emits_once(self, make_connection, transport_factory):
        """Test that close is idempotent."""
        connection = make_connection()
        closes = collect(connection, "close")

        connection.close()
        connection.close()

        assert closes == [None]
        assert connection.closed is True
        assert transport_factory.current.close_calls == 1
        assert connection.ready_state == ReadyState.CLOSED

    def test_close_cancels_pending_reconnect(self, make_connection, transport_factory, fake_loop):
        """Test that no transport is opened after close, even if the timer fires."""
        connection = make_connection()
        collect(connection, "error")

        transport_factory.current.fail()
        timer = fake_loop.pending[0]
        connection.close()

        assert timer.cancelled is True
        timer.fire()
        assert len(transport_factory.transports) == 1

    def test_no_events_after_close(self, make_connection, transport_factory, fake_loop):
        """Test that late transport callbacks are ignored once closed."""
        connection = make_connection()
        errors = collect(connection, "error")
        events = collect(connection, "stream_event")

        transport = transport_factory.current
        connection.close()
        transport.on_event("stream_event", "{}")
        transport.on_error(TransportError("late"))

        assert events == []
        assert errors == []
        assert fake_loop.timers == []

    def test_context_manager_closes(self, make_connection):
        """Test the synchronous context manager."""
        with make_connection() as connection:
            assert connection.closed is False

        assert connection.closed is True


class TestDefaultLoop:
    """Tests using the running event loop for the reconnect timer."""

    async def test_timer_scheduled_on_running_loop(self, transport_factory):
        """Test that the running loop is used when none is given."""
        connection = StreamConnection(
            STREAM_URL,
            policy=ReconnectPolicy(initial_delay=0.01),
            transport_factory=transport_factory,
        )
        collect(connection, "error")
        reopened = []
        connection.on("open", lambda: reopened.append(True))

        transport_factory.current.fail()

        for _ in range(50):
            if len(transport_factory.transports) == 2:
                break
            await asyncio.sleep(0.01)

        assert len(transport_factory.transports) == 2
        transport_factory.current.open()
        assert reopened == [True]
        connection.close()
