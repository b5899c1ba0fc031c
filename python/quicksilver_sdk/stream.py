"""
Location: python/quicksilver_sdk/stream.py

Summary:
    Server-Sent Events (SSE) wire parsing. Turns the lines of a
    text/event-stream body into ServerSentEvent frames.

Usage:
    Used by transport_sse.EventSource to split the body of a streaming
    httpx response into named frames. Payloads are left as text; JSON
    decoding is done by the StreamConnection so parse failures can be
    reported per event category.

Example:
    from quicksilver_sdk.stream import iter_sse_events

    async with client.stream("GET", url) as response:
        async for event in iter_sse_events(response.aiter_lines()):
            print(event.event, event.data)
"""

from typing import AsyncIterable, AsyncIterator, Optional
from pydantic import BaseModel


class ServerSentEvent(BaseModel):
    """
    A single dispatched SSE frame.

    Attributes:
        event: Event name; "message" when the frame had no event field
        data: Payload text, multiple data lines joined with newlines
        id: Last event id field seen in the frame
        retry: Reconnection time requested by the server, in milliseconds
    """
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


async def iter_sse_events(
    lines: AsyncIterable[str]
) -> AsyncIterator[ServerSentEvent]:
    """
    Parse SSE frames from an async iterable of lines.

    Follows the text/event-stream format:
    - "field: value" lines, one optional space after the colon is dropped
    - lines starting with ":" are comments
    - a blank line dispatches the pending frame
    - frames without data are not dispatched

    Args:
        lines: Lines of the response body without line terminators,
               e.g. httpx.Response.aiter_lines()

    Yields:
        ServerSentEvent for every complete frame
    """
    event_name: Optional[str] = None
    data_lines: list[str] = []
    event_id: Optional[str] = None
    retry: Optional[int] = None

    async for raw in lines:
        line = raw.rstrip("\r\n")

        if not line:
            if data_lines:
                yield ServerSentEvent(
                    event=event_name or "message",
                    data="\n".join(data_lines),
                    id=event_id,
                    retry=retry,
                )
            event_name = None
            data_lines = []
            retry = None
            continue

        if line.startswith(":"):
            continue

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "event":
            event_name = value
        elif field == "data":
            data_lines.append(value)
        elif field == "id":
            event_id = value
        elif field == "retry":
            if value.isdigit():
                retry = int(value)
        # Unknown fields are ignored

    # Body ended without a trailing blank line: the partial frame is dropped
