"""
Location: python/quicksilver_sdk/resources/gateways.py

Summary:
    GatewaysResource: payment gateways and gateway execution.
"""

from typing import TYPE_CHECKING

from ..types import GatewayInfo, GatewayTransaction

if TYPE_CHECKING:
    from ..http import HttpClient


class GatewaysResource:
    def __init__(self, http: "HttpClient"):
        self._http = http

    async def list(self) -> list[GatewayInfo]:
        """List available payment gateways."""
        response = await self._http.get("/gateways")
        return [GatewayInfo.model_validate(item) for item in response.get("gateways", [])]

    async def execute_transaction(self, transaction_id: str) -> GatewayTransaction:
        """Execute a transaction through its payment gateway."""
        data = await self._http.post(f"/transactions/{transaction_id}/gateway/execute", {})
        return GatewayTransaction.model_validate(data)
