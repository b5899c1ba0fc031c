"""
Location: python/quicksilver_sdk/resources/admin.py

Summary:
    AdminResource: system-wide listings and statistics. Every endpoint
    requires admin privileges on the engine.
"""

from typing import TYPE_CHECKING

from ..types import AccountData, StreamingTransaction, SystemStats, TransactionData

if TYPE_CHECKING:
    from ..http import HttpClient


class AdminResource:
    """Admin endpoints under /admin."""

    def __init__(self, http: "HttpClient"):
        self._http = http

    async def get_stats(self) -> SystemStats:
        return SystemStats.model_validate(await self._http.get("/admin/stats"))

    async def list_accounts(self) -> list[AccountData]:
        return [AccountData.model_validate(item) for item in await self._http.get("/admin/accounts")]

    async def list_transactions(self) -> list[TransactionData]:
        return [
            TransactionData.model_validate(item)
            for item in await self._http.get("/admin/transactions")
        ]

    async def list_active_streams(self) -> list[StreamingTransaction]:
        return [
            StreamingTransaction.model_validate(item)
            for item in await self._http.get("/admin/streams")
        ]
