"""
Location: python/quicksilver_sdk/transport_sse.py

Summary:
    Event-stream transport layer. EventSource keeps one long-lived
    text/event-stream GET open over httpx and reports open, error and
    named-event notifications through plain callbacks.

Usage:
    Used by connection.StreamConnection, which owns exactly one EventSource
    at a time and replaces it wholesale on reconnect. EventSource never
    reconnects on its own: every failure leaves it CLOSED and is reported
    once through on_error.

Example:
    from quicksilver_sdk.transport_sse import EventSource

    source = EventSource("https://api.quicksilver.com/sse/streams/str_1")
    source.on_open = lambda: print("open")
    source.on_event = lambda name, data: print(name, data)
    source.on_error = lambda exc: print("error", exc)
    ...
    source.close()
"""

import asyncio
import logging
from enum import IntEnum
from typing import Callable, Optional, Protocol, Union, runtime_checkable

import httpx

from .errors import TransportError
from .stream import iter_sse_events

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}


class ReadyState(IntEnum):
    """Connection state of an event-stream transport."""
    CONNECTING = 0
    OPEN = 1
    CLOSED = 2


@runtime_checkable
class EventSourceTransport(Protocol):
    """
    Protocol for one-way event-stream transports.

    Implementations open their connection on construction and report
    through the three callbacks, which the owner assigns right after
    construction. close() must be idempotent and must not trigger
    on_error.
    """

    url: str
    ready_state: ReadyState
    on_open: Optional[Callable[[], None]]
    on_error: Optional[Callable[[BaseException], None]]
    on_event: Optional[Callable[[str, str], None]]

    def close(self) -> None:
        """Close the connection."""
        ...


class EventSource:
    """
    SSE transport over httpx.

    The connection runs in a task on the running event loop, so
    EventSource must be created from within a coroutine or loop callback.

    Attributes:
        url: URL the stream was opened against
        ready_state: CONNECTING, OPEN or CLOSED
        on_open: Called once the server answered 200
        on_error: Called with a TransportError when the stream fails or ends
        on_event: Called with (event name, payload text) for every frame
    """

    def __init__(
        self,
        url: Union[str, httpx.URL],
        *,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Open the event stream.

        Args:
            url: Stream URL
            client: Optional httpx.AsyncClient to reuse (not closed by EventSource)
            headers: Extra request headers
            timeout: Read timeout in seconds; None keeps idle streams open
        """
        self.url = str(url)
        self.ready_state = ReadyState.CONNECTING
        self.on_open: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[BaseException], None]] = None
        self.on_event: Optional[Callable[[str, str], None]] = None

        self._client = client
        self._headers = {**SSE_HEADERS, **(headers or {})}
        self._timeout = timeout
        self._closed = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    def close(self) -> None:
        """Close the stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.ready_state = ReadyState.CLOSED
        self._task.cancel()

    async def _run(self) -> None:
        client = self._client or httpx.AsyncClient(
            timeout=httpx.Timeout(10.0, read=self._timeout)
        )
        try:
            logger.debug("Opening event stream: %s", self.url)
            async with client.stream("GET", self.url, headers=self._headers) as response:
                if response.status_code != 200:
                    raise TransportError(
                        f"Event stream request failed with status {response.status_code}",
                        response.status_code,
                    )

                self.ready_state = ReadyState.OPEN
                if self.on_open:
                    self.on_open()

                async for event in iter_sse_events(response.aiter_lines()):
                    if self._closed:
                        break
                    logger.debug("Event frame %s: %r", event.event, event.data)
                    if self.on_event:
                        self.on_event(event.event, event.data)

            if not self._closed:
                raise TransportError("Event stream ended by server")
        except TransportError as exc:
            self._fail(exc)
        except httpx.HTTPError as exc:
            error = TransportError(f"Event stream connection failed: {exc}")
            error.__cause__ = exc
            self._fail(error)
        except Exception as exc:
            # CancelledError is not an Exception and still propagates
            logger.exception("Event stream task failed: %s", self.url)
            error = TransportError(f"Event stream failed: {exc}")
            error.__cause__ = exc
            self._fail(error)
        finally:
            if self._client is None:
                await client.aclose()

    def _fail(self, error: TransportError) -> None:
        if self._closed:
            return
        self.ready_state = ReadyState.CLOSED
        self._closed = True
        if self.on_error:
            self.on_error(error)
