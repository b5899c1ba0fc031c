"""
Location: python/quicksilver_sdk/resources/transactions.py

Summary:
    TransactionsResource: CRUD for transactions, gateway execution and
    conversion into streaming transactions.
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from ..http import to_body
from ..models.transaction import Transaction
from ..types import (
    CreateStreamingTransactionPayload,
    CreateTransactionPayload,
    PaginatedResponse,
    StreamingTransaction,
    TransactionData,
)

if TYPE_CHECKING:
    from ..http import HttpClient


class TransactionsResource:
    """Transaction endpoints under /transactions."""

    def __init__(self, http: "HttpClient"):
        self._http = http

    async def create(self, payload: Union[CreateTransactionPayload, dict[str, Any]]) -> Transaction:
        return Transaction(await self._http.post("/transactions", payload), self._http)

    async def retrieve(self, id: str) -> Transaction:
        return Transaction(await self._http.get(f"/transactions/{id}"), self._http)

    async def list(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        from_account: Optional[str] = None,
        to: Optional[str] = None,
        transaction_type: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PaginatedResponse[Transaction]:
        """List transactions, optionally filtered by account, type and state."""
        response = await self._http.get("/transactions", {
            "page": page,
            "limit": limit,
            "cursor": cursor,
            "from": from_account,
            "to": to,
            "transaction_type": transaction_type,
            "state": state,
        })
        return self._wrap_page(response)

    async def update(self, id: str, payload: dict[str, Any]) -> Transaction:
        return Transaction(await self._http.put(f"/transactions/{id}", payload), self._http)

    async def delete(self, id: str) -> None:
        await self._http.delete(f"/transactions/{id}")

    async def get_children(
        self,
        parent_id: str,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> PaginatedResponse[Transaction]:
        response = await self._http.get(
            f"/transactions/{parent_id}/children",
            {"page": page, "limit": limit, "cursor": cursor},
        )
        return self._wrap_page(response)

    async def execute(self, transaction_id: str, gateway_id: str) -> TransactionData:
        """Execute a transaction through a specific gateway."""
        data = await self._http.post(
            f"/transactions/{transaction_id}/execute", {"gateway_id": gateway_id}
        )
        return TransactionData.model_validate(data)

    async def create_stream(
        self,
        base_transaction_id: str,
        payload: Union[CreateStreamingTransactionPayload, dict[str, Any]],
    ) -> StreamingTransaction:
        """Convert a base transaction into a streaming transaction."""
        body = {**to_body(payload), "base_transaction_id": base_transaction_id}
        data = await self._http.post(f"/transactions/{base_transaction_id}/stream", body)
        return StreamingTransaction.model_validate(data)

    async def get_for_account(
        self,
        account_id: str,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        transaction_type: Optional[str] = None,
        state: Optional[str] = None,
    ) -> PaginatedResponse[Transaction]:
        response = await self._http.get(f"/accounts/{account_id}/transactions", {
            "page": page,
            "limit": limit,
            "cursor": cursor,
            "transaction_type": transaction_type,
            "state": state,
        })
        return self._wrap_page(response)

    def _wrap_page(self, response: dict[str, Any]) -> PaginatedResponse[Transaction]:
        return PaginatedResponse[Transaction](
            data=[Transaction(item, self._http) for item in response.get("data", [])],
            pagination=response.get("pagination", {}),
        )
