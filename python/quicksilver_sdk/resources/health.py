"""
Location: python/quicksilver_sdk/resources/health.py

Summary:
    HealthResource: service health and liveness checks.
"""

from typing import TYPE_CHECKING

from ..types import HealthStatus, PingResponse

if TYPE_CHECKING:
    from ..http import HttpClient


class HealthResource:
    def __init__(self, http: "HttpClient"):
        self._http = http

    async def check(self) -> HealthStatus:
        return HealthStatus.model_validate(await self._http.get("/health"))

    async def ping(self) -> PingResponse:
        return PingResponse.model_validate(await self._http.get("/ping"))
