"""
Location: python/quicksilver_sdk/client.py

Summary:
    Main QuicksilverClient class for quicksilver-sdk. Wires the shared
    HttpClient into every resource and exposes the fluent builders.

Usage:
    The primary entry point for using the SDK. Create a client with an API
    key, then use its resources; subscriptions to real-time events are
    opened through client.streams or the Account/Transaction models.

Example:
    from quicksilver_sdk import QuicksilverClient

    async with QuicksilverClient("sk_live_...") as client:
        alice = await client.accounts.create({"name": "Alice", "account_type": "Human"})
        stream = await client.streams.retrieve("str_123")

        connection = client.streams.subscribe(stream.base.id)
        connection.on("batch_created", lambda batch: print(batch["amount"]))
        connection.on("error", lambda error: print("stream error:", error))
"""

from typing import Any, Literal, Optional, Union

import httpx

from .builders.condition import ConditionBuilder
from .builders.product import ProductBuilder
from .http import HttpClient
from .models.account import Account
from .models.transaction import Transaction
from .resources import (
    AccountsResource,
    AdminResource,
    GatewaysResource,
    HealthResource,
    KycResource,
    StreamsResource,
    TransactionsResource,
)
from .types import AccountData, HealthStatus, PingResponse, ReconnectPolicy, TransactionData

BASE_URLS = {
    "production": "https://api.quicksilver.com",
    "sandbox": "http://localhost:3000",
}


class QuicksilverClient:
    """
    Quicksilver API client.

    Attributes:
        accounts: Account endpoints
        transactions: Transaction endpoints
        streams: Streaming transactions and real-time subscriptions
        admin: Admin endpoints
        gateways: Payment gateways
        kyc: Identity verification
        base_url: Base URL for API requests
    """

    def __init__(
        self,
        api_key: str,
        *,
        env: Literal["production", "sandbox"] = "production",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        reconnect_policy: Optional[ReconnectPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the QuicksilverClient.

        Args:
            api_key: API key for bearer auth and subscription URLs
            env: "production" or "sandbox"; ignored when base_url is given
            base_url: Override for the API base URL (trailing slash removed)
            timeout: Request timeout in seconds (default 30)
            reconnect_policy: Default ReconnectPolicy for stream subscriptions
            transport: Optional httpx transport for the HTTP client
        """
        self._api_key = api_key
        self.base_url = (base_url or BASE_URLS[env]).rstrip("/")

        self._http = HttpClient(api_key, self.base_url, timeout, transport=transport)

        # Initialize resource controllers
        self.accounts = AccountsResource(self._http)
        self.transactions = TransactionsResource(self._http)
        self.streams = StreamsResource(self._http, self.base_url, api_key, reconnect_policy)
        self.admin = AdminResource(self._http)
        self.gateways = GatewaysResource(self._http)
        self.kyc = KycResource(self._http)
        self.health_checks = HealthResource(self._http)

    async def aclose(self) -> None:
        """
        Close the HTTP client and release resources.

        Open StreamConnections are independent and must be closed separately.
        """
        await self._http.aclose()

    async def __aenter__(self) -> "QuicksilverClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args) -> None:
        """Exit async context manager and close resources."""
        await self.aclose()

    def condition(self) -> ConditionBuilder:
        """Start a new set of conditional rules."""
        return ConditionBuilder()

    def product(self, id: str) -> ProductBuilder:
        """Start defining a programmable product."""
        return ProductBuilder(id)

    def create_account(self, data: Union[Account, AccountData, dict[str, Any]]) -> Account:
        """Wrap account data in an Account bound to this client."""
        if isinstance(data, Account):
            data = data.data
        return Account(data, self._http)

    def create_transaction(self, data: Union[Transaction, TransactionData, dict[str, Any]]) -> Transaction:
        """Wrap transaction data in a Transaction bound to this client."""
        if isinstance(data, Transaction):
            data = data.data
        return Transaction(data, self._http)

    def get_api_key(self) -> str:
        """
        Get the API key, masked for display.

        Keys of 8 characters or fewer are fully masked; longer keys keep
        their first and last four characters.
        """
        key = self._api_key
        if len(key) <= 8:
            return "*" * len(key)
        return key[:4] + "*" * (len(key) - 8) + key[-4:]

    async def ping(self) -> PingResponse:
        """Test the API connection."""
        return await self.health_checks.ping()

    async def health(self) -> HealthStatus:
        """Get API health status."""
        return await self.health_checks.check()

    async def get_openapi_spec(self) -> dict[str, Any]:
        return await self._http.get("/openapi.json")


__all__ = ["QuicksilverClient"]
