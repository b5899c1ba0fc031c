"""
Location: python/quicksilver_sdk/resources/streams.py

Summary:
    StreamsResource: control of streaming transactions (pause, resume,
    stop, update) and real-time subscriptions to their events.

Usage:
    The subscribe* methods return a StreamConnection carrying the client's
    API key as the api_key query parameter. They must be called from a
    running event loop.

Example:
    connection = client.streams.subscribe("str_123")
    connection.on("batch_created", lambda batch: print(batch["amount"]))
    connection.on("error", lambda error: print("stream error:", error))
"""

from typing import TYPE_CHECKING, Any, Optional

from ..connection import StreamConnection
from ..types import PaginatedResponse, ReconnectPolicy, StatusResponse, StreamingTransaction

if TYPE_CHECKING:
    from ..http import HttpClient


class StreamsResource:
    """Streaming transaction endpoints under /streams and /sse."""

    def __init__(
        self,
        http: "HttpClient",
        base_url: str,
        api_key: Optional[str] = None,
        policy: Optional[ReconnectPolicy] = None,
    ):
        """
        Args:
            http: Shared HttpClient
            base_url: API base URL used to build /sse subscription URLs
            api_key: API key appended to subscription URLs
            policy: Default ReconnectPolicy for subscriptions
        """
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._policy = policy

    async def retrieve(self, id: str) -> StreamingTransaction:
        return StreamingTransaction.model_validate(await self._http.get(f"/streams/{id}"))

    async def list(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        from_account: Optional[str] = None,
        to: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PaginatedResponse[StreamingTransaction]:
        response = await self._http.get("/streams", {
            "page": page,
            "limit": limit,
            "cursor": cursor,
            "from": from_account,
            "to": to,
            "state": state,
        })
        return PaginatedResponse[StreamingTransaction].model_validate(response)

    async def pause(self, id: str) -> StatusResponse:
        return StatusResponse.model_validate(await self._http.post(f"/streams/{id}/pause"))

    async def resume(self, id: str) -> StatusResponse:
        return StatusResponse.model_validate(await self._http.post(f"/streams/{id}/resume"))

    async def stop(self, id: str) -> StatusResponse:
        """Permanently stop a stream."""
        return StatusResponse.model_validate(await self._http.post(f"/streams/{id}/stop"))

    async def update(self, id: str, payload: dict[str, Any]) -> StreamingTransaction:
        """Update rate, rate_unit or end_time of a stream."""
        return StreamingTransaction.model_validate(
            await self._http.put(f"/streams/{id}", payload)
        )

    async def get_for_account(
        self,
        account_id: str,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PaginatedResponse[StreamingTransaction]:
        response = await self._http.get(f"/accounts/{account_id}/streams", {
            "page": page,
            "limit": limit,
            "cursor": cursor,
            "state": state,
        })
        return PaginatedResponse[StreamingTransaction].model_validate(response)

    def subscribe(self, id: str) -> StreamConnection:
        """Subscribe to real-time events of one stream."""
        return self._connect(f"/sse/streams/{id}")

    def subscribe_to_account(self, account_id: str) -> StreamConnection:
        """Subscribe to real-time events of every stream of an account."""
        return self._connect(f"/sse/accounts/{account_id}/streams")

    def subscribe_to_all(self) -> StreamConnection:
        """Subscribe to real-time events of all streams."""
        return self._connect("/sse/streams")

    def _connect(self, path: str) -> StreamConnection:
        return StreamConnection(
            f"{self._base_url}{path}", self._api_key or None, policy=self._policy
        )
