"""
Location: python/quicksilver_sdk/resources/accounts.py

Summary:
    AccountsResource: CRUD for accounts. Results are wrapped in Account
    active records.
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from ..http import to_body
from ..models.account import Account
from ..models.transaction import utc_now
from ..types import CreateAccountPayload, PaginatedResponse

if TYPE_CHECKING:
    from ..http import HttpClient


class AccountsResource:
    """Account endpoints under /accounts."""

    def __init__(self, http: "HttpClient"):
        self._http = http

    async def create(self, payload: Union[CreateAccountPayload, dict[str, Any]]) -> Account:
        """
        Create an account.

        Root accounts (no parent_id) are created verified by the system;
        delegated accounts start unverified. An explicit verification
        block in the payload wins.
        """
        body = dict(to_body(payload))
        if not body.get("verification"):
            if body.get("parent_id"):
                body["verification"] = {"status": "unverified"}
            else:
                body["verification"] = {
                    "status": "verified",
                    "verified_at": utc_now(),
                    "kyc_data": {"verified_by": "system", "document_type": "root_account"},
                }
        return Account(await self._http.post("/accounts", body), self._http)

    async def retrieve(self, id: str) -> Account:
        return Account(await self._http.get(f"/accounts/{id}"), self._http)

    async def list(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> PaginatedResponse[Account]:
        response = await self._http.get(
            "/accounts", {"page": page, "limit": limit, "cursor": cursor}
        )
        return self._wrap_page(response)

    async def update(self, id: str, payload: dict[str, Any]) -> Account:
        return Account(await self._http.put(f"/accounts/{id}", payload), self._http)

    async def delete(self, id: str) -> None:
        await self._http.delete(f"/accounts/{id}")

    async def get_children(
        self,
        parent_id: str,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> PaginatedResponse[Account]:
        """List the delegated child accounts of a parent."""
        response = await self._http.get(
            f"/accounts/{parent_id}/children",
            {"page": page, "limit": limit, "cursor": cursor},
        )
        return self._wrap_page(response)

    def _wrap_page(self, response: dict[str, Any]) -> PaginatedResponse[Account]:
        return PaginatedResponse[Account](
            data=[Account(item, self._http) for item in response.get("data", [])],
            pagination=response.get("pagination", {}),
        )
