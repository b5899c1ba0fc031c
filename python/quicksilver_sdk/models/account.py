"""
Location: python/quicksilver_sdk/models/account.py

Summary:
    Account: active-record wrapper around AccountData. Delegates
    sub-agents, starts transactions, purchases products, manages
    verification and subscribes to the account's stream events.

Example:
    agent = await client.accounts.create({"name": "Agent", "account_type": "AgentMain"})
    worker = await agent.delegate("Worker", limits={"daily": 100})
    payment = worker.transaction({"amount": 5, "transaction_type": "Payment", "to": vendor.id})
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from ..connection import StreamConnection
from ..types import AccountData, AccountLimits, ReconnectPolicy, TransactionData, Verification
from .transaction import Transaction, utc_now

if TYPE_CHECKING:
    from ..builders.product import ProductBuilder
    from ..http import HttpClient


class Account:
    """
    An account bound to the HTTP client that loaded it.

    Attributes:
        data: The current AccountData; replaced after every server call
    """

    def __init__(self, data: Union[AccountData, dict], http: "HttpClient"):
        self.data = AccountData.model_validate(data)
        self._http = http

    @property
    def id(self) -> str:
        return self.data.id

    @property
    def name(self) -> str:
        return self.data.name

    @property
    def account_type(self) -> str:
        return self.data.account_type

    @property
    def parent_id(self) -> Optional[str]:
        return self.data.parent_id

    @property
    def meta(self) -> dict[str, Any]:
        return self.data.meta

    @property
    def limits(self) -> AccountLimits:
        return self.data.limits

    @property
    def verification(self) -> Verification:
        return self.data.verification

    @property
    def created_at(self) -> Optional[str]:
        return self.data.created_at

    @property
    def updated_at(self) -> Optional[str]:
        return self.data.updated_at

    @property
    def children(self) -> list[str]:
        return self.data.children

    async def delegate(self, name: str, limits: Optional[dict[str, float]] = None) -> "Account":
        """Create a delegated sub-agent account under this account."""
        payload = {
            "name": name,
            "account_type": "AgentDelegated",
            "parent_id": self.id,
            "limits": limits or {},
        }
        return Account(await self._http.post("/accounts", payload), self._http)

    def transaction(self, details: dict[str, Any]) -> Transaction:
        """
        Start a local draft transaction from this account.

        Args:
            details: amount, transaction_type and optionally currency, to,
                     parent_id, meta

        Returns:
            A Draft Transaction; execute() persists and runs it
        """
        now = utc_now()
        data = TransactionData.model_validate({
            **details,
            "from": self.id,
            "id": "",
            "state": "Draft",
            "created_at": now,
            "updated_at": now,
            "children": [],
        })
        return Transaction(data, self._http)

    async def purchase(self, product: "ProductBuilder", options: Optional[dict[str, Any]] = None) -> Transaction:
        """Purchase a programmable product."""
        data = await self._http.post(
            f"/accounts/{self.id}/purchase",
            {"productId": product.id, "options": options or {}},
        )
        return Transaction(data, self._http)

    async def refresh(self) -> "Account":
        self.data = AccountData.model_validate(await self._http.get(f"/accounts/{self.id}"))
        return self

    async def get_children(self) -> list["Account"]:
        children = await self._http.get(f"/accounts/{self.id}/children")
        return [Account(child, self._http) for child in children]

    async def update_limits(self, limits: dict[str, float]) -> "Account":
        self.data = AccountData.model_validate(
            await self._http.patch(f"/accounts/{self.id}", {"limits": limits})
        )
        return self

    async def get_balance(self) -> dict[str, Any]:
        """Return {"amount": ..., "currency": ...}."""
        return await self._http.get(f"/accounts/{self.id}/balance")

    async def submit_kyc(
        self,
        document_type: str,
        document_number: str,
        document_file: Any = None,
    ) -> "Account":
        """
        Submit KYC documents for this account.

        Args:
            document_type: e.g. "passport" or "drivers_license"
            document_number: Number printed on the document
            document_file: Optional scan, as bytes, a binary file object or an
                           httpx-style (filename, content, content_type) tuple
        """
        files = {"document_file": document_file} if document_file is not None else None
        self.data = AccountData.model_validate(
            await self._http.post(
                f"/accounts/{self.id}/kyc",
                form={"document_type": document_type, "document_number": document_number},
                files=files,
            )
        )
        return self

    async def verify(self, verified_by: str) -> "Account":
        """Mark the account verified. Requires admin permissions."""
        self.data = AccountData.model_validate(
            await self._http.post(
                f"/accounts/{self.id}/verify",
                {"verified_by": verified_by, "verified_at": utc_now()},
            )
        )
        return self

    async def reject_verification(self, reason: str) -> "Account":
        """Reject the account's verification. Requires admin permissions."""
        self.data = AccountData.model_validate(
            await self._http.post(
                f"/accounts/{self.id}/reject-verification",
                {"reason": reason, "rejected_at": utc_now()},
            )
        )
        return self

    def get_verification_status(self) -> Verification:
        return self.data.verification

    def is_verified(self) -> bool:
        return self.data.verification.status == "verified"

    def is_root_account(self) -> bool:
        return not self.data.parent_id

    def can_transact(self) -> bool:
        return self.is_verified()

    def can_delegate(self) -> bool:
        return self.is_verified()

    def subscribe(self, policy: Optional[ReconnectPolicy] = None) -> StreamConnection:
        """
        Subscribe to real-time events for all streams of this account.

        Must be called from a running event loop.
        """
        return StreamConnection(
            f"{self._http.base_url}/sse/accounts/{self.id}/streams",
            self._http.api_key or None,
            policy=policy,
        )

    def __str__(self) -> str:
        return f"Account({self.id}, {self.name}, {self.account_type})"
