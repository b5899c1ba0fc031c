"""
Location: python/quicksilver_sdk/resources/kyc.py

Summary:
    KycResource: identity verification (Know Your Customer) for accounts.
"""

from typing import TYPE_CHECKING, Any, Union

from ..types import KycInitiatePayload, KycInitiateResponse, KycStatus

if TYPE_CHECKING:
    from ..http import HttpClient


class KycResource:
    """KYC endpoints under /kyc."""

    def __init__(self, http: "HttpClient"):
        self._http = http

    async def initiate(self, payload: Union[KycInitiatePayload, dict[str, Any]]) -> KycInitiateResponse:
        """Start KYC verification for an account."""
        return KycInitiateResponse.model_validate(await self._http.post("/kyc/initiate", payload))

    async def get_status(self, account_id: str) -> KycStatus:
        return KycStatus.model_validate(await self._http.get(f"/kyc/status/{account_id}"))

    async def process_webhook(self, webhook_data: dict[str, Any]) -> dict[str, Any]:
        """Forward a KYC provider webhook payload. Normally called by the provider."""
        return await self._http.post("/kyc/webhook", webhook_data)
