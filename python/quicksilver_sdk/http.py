"""
Location: python/quicksilver_sdk/http.py

Summary:
    HttpClient: thin async JSON client over httpx. Adds auth and SDK
    headers, encodes bodies, decodes responses and maps failures onto the
    quicksilver_sdk.errors hierarchy.

Usage:
    Shared by every resource and active-record model. Not normally used
    directly; QuicksilverClient builds one from its api key and base URL.

Example:
    from quicksilver_sdk.http import HttpClient

    async with HttpClient("sk_test_123", "https://api.quicksilver.com") as http:
        account = await http.get("/accounts/acc_1")
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from .errors import (
    APIErrorResponse,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    QuicksilverError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from .types import APIError

logger = logging.getLogger(__name__)

USER_AGENT = "quicksilver-sdk/0.1.0"


def to_body(data: Any) -> Any:
    """Convert a pydantic payload to its JSON wire form; other values pass through."""
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True)
    return data


class HttpClient:
    """
    Async JSON HTTP client for the Quicksilver API.

    Attributes:
        api_key: API key sent as a bearer token (may be empty)
        base_url: Base URL for relative paths (trailing slash removed)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 30.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HttpClient.

        Args:
            api_key: API key; no Authorization header is sent when empty
            base_url: Base URL for API requests
            timeout: Request timeout in seconds (default 30)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._http.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        return await self.request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        data: Any = None,
        headers: Optional[dict[str, str]] = None,
        *,
        form: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> Any:
        return await self.request("POST", path, data=data, headers=headers, form=form, files=files)

    async def put(self, path: str, data: Any = None, headers: Optional[dict[str, str]] = None) -> Any:
        return await self.request("PUT", path, data=data, headers=headers)

    async def patch(self, path: str, data: Any = None, headers: Optional[dict[str, str]] = None) -> Any:
        return await self.request("PATCH", path, data=data, headers=headers)

    async def delete(self, path: str, headers: Optional[dict[str, str]] = None) -> Any:
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        data: Any = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        form: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to base_url, or an absolute URL
            data: JSON body (dict, list or pydantic model)
            params: Query parameters; None values are dropped
            headers: Extra headers for this request
            form: Form fields; with form or files the body is sent as
                  form data instead of JSON (multipart when files are given)
            files: Files to upload, as accepted by httpx

        Returns:
            Parsed JSON, {} for 204 responses, or text for non-JSON bodies

        Raises:
            NetworkError: On timeouts and connection failures
            QuicksilverError: Subclass matching the error response
        """
        url = path if path.startswith(("http://", "https://")) else f"{self.base_url}{path}"

        as_form = form is not None or files is not None

        # httpx sets the form content type and multipart boundary itself
        req_headers = {} if as_form else {"Content-Type": "application/json"}
        req_headers.update({"User-Agent": USER_AGENT, **(headers or {})})
        if self.api_key:
            req_headers["Authorization"] = f"Bearer {self.api_key}"

        query = {k: v for k, v in (params or {}).items() if v is not None}

        if as_form:
            body: dict[str, Any] = {"data": form, "files": files}
        else:
            body = {"json": to_body(data)}

        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(
                method,
                url,
                params=query or None,
                headers=req_headers,
                **body,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError("Request timeout") from exc
        except httpx.HTTPError as exc:
            raise NetworkError("Network error") from exc

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        is_json = "application/json" in content_type

        if response.is_error:
            api_error: Optional[APIError] = None
            if is_json:
                try:
                    api_error = APIError.model_validate(response.json())
                except ValueError:
                    # Not the structured error shape; fall back to the status code
                    api_error = None
            logger.debug("HTTP %d error response", response.status_code)
            raise self._error_from_response(response, api_error)

        if response.status_code == 204:
            return {}
        if is_json:
            return response.json()
        return response.text

    def _error_from_response(
        self,
        response: httpx.Response,
        api_error: Optional[APIError],
    ) -> QuicksilverError:
        if api_error:
            return APIErrorResponse(api_error)

        status = response.status_code
        if status == 400:
            return ValidationError("Bad request")
        if status == 401:
            return AuthenticationError()
        if status == 404:
            return NotFoundError("Resource")
        if status == 429:
            return RateLimitError("Rate limit exceeded", self._parse_retry_after(response))
        if status in (500, 502, 503, 504):
            return ServerError(status_code=status)
        return QuicksilverError(f"HTTP {status} error", status)

    def _parse_retry_after(self, response: httpx.Response) -> Optional[int]:
        value = response.headers.get("retry-after", "").strip()
        return int(value) if value.isdigit() else None
