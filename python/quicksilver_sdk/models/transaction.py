"""
Location: python/quicksilver_sdk/models/transaction.py

Summary:
    Transaction: active-record wrapper around TransactionData with
    lifecycle operations (execute, cancel, trigger events), metadata and
    conditional logic helpers, and real-time subscription.

Usage:
    Returned by TransactionsResource and Account.transaction(). A draft
    created locally by Account.transaction() has no id until execute()
    persists it.

Example:
    payment = sender.transaction({"amount": 100, "transaction_type": "Payment", "to": bob.id})
    await payment.execute()

    connection = payment.subscribe()
    connection.on("stream_event", print)
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional, Union

from ..connection import StreamConnection
from ..errors import InvalidStateError
from ..types import ReconnectPolicy, StreamingTransaction, TransactionData

if TYPE_CHECKING:
    from ..builders.condition import ConditionBuilder
    from ..http import HttpClient

FINAL_STATES = ("Completed", "Failed", "Cancelled")
PENDING_STATES = ("Draft", "Pending")

# Fields sent when a local draft is persisted
_CREATE_FIELDS = {
    "amount", "currency", "transaction_type", "from_", "to", "parent_id", "meta", "conditions",
}


def utc_now() -> str:
    """Current time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class Transaction:
    """
    A transaction bound to the HTTP client that loaded it.

    Attributes:
        data: The current TransactionData; replaced after every server call
    """

    def __init__(self, data: Union[TransactionData, dict], http: "HttpClient"):
        self.data = TransactionData.model_validate(data)
        self._http = http

    @property
    def id(self) -> str:
        return self.data.id

    @property
    def transaction_type(self) -> str:
        return self.data.transaction_type

    @property
    def amount(self) -> float:
        return self.data.amount

    @property
    def currency(self) -> str:
        currency = self.data.currency
        if isinstance(currency, dict):
            return currency.get("Custom", "")
        return currency

    @property
    def from_account(self) -> str:
        return self.data.from_

    @property
    def to(self) -> Optional[str]:
        return self.data.to

    @property
    def parent_id(self) -> Optional[str]:
        return self.data.parent_id

    @property
    def state(self) -> str:
        return self.data.state

    @property
    def meta(self) -> dict[str, Any]:
        return self.data.meta

    @property
    def created_at(self) -> Optional[str]:
        return self.data.created_at

    @property
    def updated_at(self) -> Optional[str]:
        return self.data.updated_at

    @property
    def executed_at(self) -> Optional[str]:
        return self.data.executed_at

    @property
    def children(self) -> list[str]:
        return self.data.children

    @property
    def conditions(self) -> Optional[list[dict[str, Any]]]:
        return self.data.conditions

    async def execute(self) -> "Transaction":
        """
        Execute the transaction, persisting it first if it is a local draft.

        Raises:
            InvalidStateError: If the transaction is not in the Draft state
        """
        if self.data.state != "Draft":
            raise InvalidStateError(f"Cannot execute transaction in state: {self.data.state}")

        if not self.data.id:
            payload = self.data.model_dump(
                by_alias=True, exclude_none=True, include=_CREATE_FIELDS
            )
            self.data = TransactionData.model_validate(
                await self._http.post("/transactions", payload)
            )

        self.data = TransactionData.model_validate(
            await self._http.post(f"/transactions/{self.id}/execute")
        )
        return self

    async def cancel(self) -> "Transaction":
        """
        Cancel the transaction.

        Raises:
            InvalidStateError: If the transaction already completed or failed
        """
        if self.data.state in ("Completed", "Failed"):
            raise InvalidStateError(f"Cannot cancel transaction in state: {self.data.state}")
        self.data = TransactionData.model_validate(
            await self._http.post(f"/transactions/{self.id}/cancel")
        )
        return self

    async def trigger_event(self, event: str, context: Optional[dict[str, Any]] = None) -> "Transaction":
        """Fire an event against the transaction's conditional logic."""
        self.data = TransactionData.model_validate(
            await self._http.post(
                f"/transactions/{self.id}/trigger",
                {"event": event, "context": context or {}},
            )
        )
        return self

    async def get_cost(self) -> float:
        """Amount for payments and escrows; accrued amount for streams."""
        if self.data.transaction_type == "Stream":
            info = await self._http.get(f"/transactions/{self.id}/stream-info")
            return info.get("accumulated") or 0
        return self.data.amount

    async def refresh(self) -> "Transaction":
        self.data = TransactionData.model_validate(
            await self._http.get(f"/transactions/{self.id}")
        )
        return self

    async def get_children(self) -> list["Transaction"]:
        children = await self._http.get(f"/transactions/{self.id}/children")
        return [Transaction(child, self._http) for child in children]

    async def update(self, updates: dict[str, Any]) -> "Transaction":
        self.data = TransactionData.model_validate(
            await self._http.put(f"/transactions/{self.id}", updates)
        )
        return self

    async def update_meta(self, meta: dict[str, Any]) -> "Transaction":
        self.data = TransactionData.model_validate(
            await self._http.patch(f"/transactions/{self.id}", {"meta": meta})
        )
        return self

    async def to_stream(self, rate: float, rate_unit: str) -> StreamingTransaction:
        """Convert this transaction into a streaming payment."""
        data = await self._http.post(
            f"/transactions/{self.id}/stream",
            {"rate": rate, "rate_unit": rate_unit, "base_transaction_id": self.id},
        )
        return StreamingTransaction.model_validate(data)

    def with_conditions(self, conditions: "ConditionBuilder") -> "Transaction":
        """Attach conditional logic; sent when the draft is persisted."""
        self.data.conditions = conditions.to_json()["conditions"]
        return self

    def with_metadata(self, metadata: dict[str, Any]) -> "Transaction":
        self.data.meta = {**self.data.meta, **metadata}
        return self

    def get_status(self) -> str:
        return self.data.state

    def is_final(self) -> bool:
        return self.data.state in FINAL_STATES

    def is_pending(self) -> bool:
        return self.data.state in PENDING_STATES

    def is_completed(self) -> bool:
        return self.data.state == "Completed"

    def is_failed(self) -> bool:
        return self.data.state == "Failed"

    def subscribe(self, policy: Optional[ReconnectPolicy] = None) -> StreamConnection:
        """
        Subscribe to real-time events for this transaction.

        Must be called from a running event loop.
        """
        return StreamConnection(
            f"{self._http.base_url}/sse/transactions/{self.id}",
            self._http.api_key or None,
            policy=policy,
        )

    def __str__(self) -> str:
        return f"Transaction({self.id}, {self.amount} {self.currency}, {self.state})"
