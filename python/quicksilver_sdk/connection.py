"""
Location: python/quicksilver_sdk/connection.py

Summary:
    StreamConnection: a self-healing subscription to a server-sent event
    feed. Frames from the transport are decoded and re-emitted to local
    listeners by category; when the transport is definitively closed the
    connection reopens it with bounded exponential backoff, keeping every
    registered listener.

Usage:
    Created by StreamsResource.subscribe*(), Account.subscribe() and
    Transaction.subscribe(). Must be created from a running event loop;
    listeners are plain callables invoked synchronously on that loop.

    Always register an "error" listener: failures are only ever delivered
    as "error" events, never raised. Without a listener they are logged
    and otherwise unobserved.

Example:
    connection = client.streams.subscribe("str_123")
    connection.on("stream_event", lambda data: print(data["event_type"]))
    connection.on("batch_created", lambda data: print(data["amount"]))
    connection.on("error", lambda error: print("stream error:", error))
    ...
    connection.close()
"""

import asyncio
import json
import logging
from typing import Any, Callable, Optional, Union

import httpx

from .errors import ReconnectExhaustedError, StreamError, StreamParseError
from .transport_sse import EventSource, EventSourceTransport, ReadyState
from .types import ReconnectPolicy

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]
TransportFactory = Callable[[str], EventSourceTransport]

# Categories whose payloads must be JSON; anything else falls back to the raw text
STRICT_EVENTS = frozenset({"stream_event", "batch_created"})


class StreamConnection:
    """
    Reconnecting subscription to one event-stream URL.

    Local categories:
        open: transport opened (no payload)
        error: a StreamError or the transport's error object
        close: close() was called (no payload, emitted once)
        stream_event, batch_created: the decoded JSON payload; invalid
        JSON is reported on "error" instead
        message, or any other wire event name: the decoded JSON payload,
        or the raw text when it is not JSON

    Listeners for a category run in registration order. A listener added
    to a category while that category is being dispatched is first called
    for the next frame.

    Attributes:
        url: Effective URL, including the api_key parameter
        ready_state: ReadyState of the current transport
    """

    def __init__(
        self,
        url: Union[str, httpx.URL],
        api_key: Optional[str] = None,
        *,
        policy: Optional[ReconnectPolicy] = None,
        transport_factory: Optional[TransportFactory] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Open the subscription.

        The transport is opened before this returns; network failures are
        reported later through "error" events.

        Args:
            url: Subscription URL, e.g. https://api.quicksilver.com/sse/streams/str_1
            api_key: Optional API key, appended as the api_key query parameter
            policy: Reconnection settings (defaults: 5 attempts, 1s doubling to 30s)
            transport_factory: Callable building a transport for a URL (EventSource by default)
            loop: Event loop for the reconnect timer (the running loop by default)
        """
        policy = policy or ReconnectPolicy()

        effective_url = httpx.URL(str(url))
        if api_key:
            effective_url = effective_url.copy_add_param("api_key", api_key)
        self._url = str(effective_url)
        self._log_url = str(effective_url.copy_remove_param("api_key"))

        self._listeners: dict[str, list[Listener]] = {}
        self._transport_factory = transport_factory or EventSource
        self._loop = loop

        self._max_reconnect_attempts = policy.max_attempts
        self._initial_delay = policy.initial_delay
        self._max_delay = policy.max_delay
        self._reconnect_delay = policy.initial_delay
        self._reconnect_attempts = 0
        self._is_reconnecting = False
        self._reconnect_timer: Optional[asyncio.TimerHandle] = None
        self._exhausted = False
        self._closed = False

        self._transport = self._open_transport()

    # Listener registry

    def on(self, category: str, listener: Listener) -> "StreamConnection":
        """
        Register a listener for a category.

        Args:
            category: "open", "error", "close", "message", or an event name
            listener: Callable receiving the category's payload, if any

        Returns:
            This connection, for chaining
        """
        self._listeners.setdefault(category, []).append(listener)
        return self

    def off(self, category: str, listener: Listener) -> "StreamConnection":
        """Remove one registration of a listener. Unknown listeners are ignored."""
        listeners = self._listeners.get(category)
        if listeners and listener in listeners:
            listeners.remove(listener)
        return self

    def listener_count(self, category: str) -> int:
        return len(self._listeners.get(category, ()))

    def _emit(self, category: str, *args: Any) -> None:
        listeners = list(self._listeners.get(category, ()))
        if not listeners:
            if category == "error":
                logger.warning(
                    "Unhandled error on event stream %s: %s",
                    self._log_url, args[0] if args else None,
                )
            return
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception("Error in %s listener for %s", category, self._log_url)

    # Accessors

    @property
    def url(self) -> str:
        return self._url

    @property
    def ready_state(self) -> ReadyState:
        return self._transport.ready_state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def reconnect_delay(self) -> float:
        """Delay in seconds the next reconnection attempt will wait."""
        return self._reconnect_delay

    @property
    def max_reconnect_attempts(self) -> int:
        return self._max_reconnect_attempts

    def set_max_reconnect_attempts(self, max_attempts: int) -> None:
        """
        Set the reconnection budget. Takes effect at the next decision;
        an attempt already scheduled is not affected.
        """
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        self._max_reconnect_attempts = max_attempts

    def set_reconnect_delay(self, delay: float) -> None:
        """
        Set the reconnection delay in seconds. It is used for the next
        scheduled attempt and becomes the value the delay resets to after a
        successful open. An attempt already scheduled keeps its delay.
        """
        if delay <= 0:
            raise ValueError("delay must be > 0")
        self._initial_delay = delay
        self._reconnect_delay = delay

    # Lifecycle

    def close(self) -> None:
        """
        Close the subscription for good.

        Cancels any pending reconnection, closes the transport and emits
        "close". Further calls do nothing.
        """
        if self._closed:
            return
        self._closed = True
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None
        self._is_reconnecting = False
        self._transport.close()
        logger.info("Event stream closed: %s", self._log_url)
        self._emit("close")

    def __enter__(self) -> "StreamConnection":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"StreamConnection({self._log_url!r}, ready_state={self.ready_state.name})"

    # Transport wiring

    def _open_transport(self) -> EventSourceTransport:
        transport = self._transport_factory(self._url)
        transport.on_open = lambda: self._handle_open(transport)
        transport.on_error = lambda error: self._handle_error(transport, error)
        transport.on_event = lambda name, data: self._handle_event(transport, name, data)
        return transport

    def _handle_open(self, transport: EventSourceTransport) -> None:
        if transport is not self._transport or self._closed:
            return
        logger.info("Event stream open: %s", self._log_url)
        self._reconnect_attempts = 0
        self._reconnect_delay = self._initial_delay
        self._emit("open")

    def _handle_error(self, transport: EventSourceTransport, error: BaseException) -> None:
        if transport is not self._transport or self._closed:
            return
        self._emit("error", error)

        # Only a hard close is worth reconnecting; a transport that is
        # still open or connecting recovers by itself.
        if (
            transport.ready_state == ReadyState.CLOSED
            and not self._is_reconnecting
            and not self._closed
        ):
            self._handle_reconnection()

    def _handle_event(self, transport: EventSourceTransport, name: str, data: str) -> None:
        if transport is not self._transport or self._closed:
            return
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            if name in STRICT_EVENTS:
                error = StreamParseError(name, data, str(exc))
                error.__cause__ = exc
                self._emit("error", error)
            else:
                self._emit(name, data)
            return
        self._emit(name, payload)

    # Reconnection

    def _handle_reconnection(self) -> None:
        if self._closed or self._exhausted:
            return

        if self._reconnect_attempts >= self._max_reconnect_attempts:
            self._exhausted = True
            logger.warning(
                "Giving up on event stream %s after %d reconnection attempts",
                self._log_url, self._reconnect_attempts,
            )
            self._emit("error", ReconnectExhaustedError(self._reconnect_attempts))
            return

        self._is_reconnecting = True
        self._reconnect_attempts += 1
        delay = self._reconnect_delay

        logger.info(
            "Reconnecting to %s in %.1fs (attempt %d/%d)",
            self._log_url, delay, self._reconnect_attempts, self._max_reconnect_attempts,
        )

        loop = self._loop or asyncio.get_running_loop()
        self._reconnect_timer = loop.call_later(delay, self._reconnect)
        self._reconnect_delay = min(delay * 2, self._max_delay)

    def _reconnect(self) -> None:
        self._reconnect_timer = None
        if self._closed:
            self._is_reconnecting = False
            return

        self._transport.close()
        try:
            transport = self._open_transport()
        except Exception as exc:
            self._is_reconnecting = False
            logger.error("Reconnection to %s failed: %s", self._log_url, exc)
            error = StreamError(f"Reconnection failed: {exc}")
            error.__cause__ = exc
            self._emit("error", error)
            self._handle_reconnection()
            return

        self._transport = transport
        self._is_reconnecting = False
