"""HTTP transports used by the vendor collectors.

A collector is given one transport when it is built: `DirectTransport` calls
the vendor API with credentials, `ProxyTransport` goes through the proxy
routes of another running instance of this service.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from app.errors import VendorAPIError

logger = logging.getLogger(__name__)

PROXY_PATH = "/api/v1/proxy/{vendor}"


def _error_message(response: httpx.Response) -> str:
    """Best-effort error text from a failed vendor response."""
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        error = data.get("error") or data.get("message") or data.get("detail")
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return str(error)

    return f"HTTP {response.status_code}: {response.reason_phrase}"


class Transport(ABC):
    """Fetches JSON documents from one vendor."""

    def __init__(self, vendor: str, client: httpx.AsyncClient):
        self.vendor = vendor
        self.client = client

    @abstractmethod
    async def get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET a vendor endpoint and decode its JSON body."""

    async def aclose(self):
        await self.client.aclose()

    async def _request(self, url: str, params: dict[str, Any] | None) -> Any:
        logger.info(f"Requesting {self.vendor} {url}")
        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"HTTP error fetching {self.vendor} {url}: {e}")
            raise VendorAPIError(self.vendor, str(e) or type(e).__name__) from e

        logger.info(f"{self.vendor} responded with {response.status_code}")
        if response.is_error:
            raise VendorAPIError(
                self.vendor,
                _error_message(response),
                status_code=response.status_code,
                details=response.text,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise VendorAPIError(
                self.vendor,
                "Invalid JSON response",
                status_code=response.status_code,
                details=response.text,
            ) from e


class DirectTransport(Transport):
    """Calls the vendor API directly with its own authentication."""

    def __init__(
        self,
        vendor: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        auth: httpx.Auth | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json", **(headers or {})},
            auth=auth,
            timeout=timeout,
            transport=transport,
        )
        super().__init__(vendor, client)

    async def get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request(endpoint, params)


class ProxyTransport(Transport):
    """Calls `/api/v1/proxy/{vendor}` on another instance of this service."""

    def __init__(
        self,
        vendor: str,
        proxy_base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        client = httpx.AsyncClient(
            base_url=proxy_base_url,
            headers={"Content-Type": "application/json", "X-API-Key": api_key},
            timeout=timeout,
            transport=transport,
        )
        super().__init__(vendor, client)

    async def get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        # Vendor query parameters travel inside the endpoint value
        if params:
            endpoint = f"{endpoint}?{httpx.QueryParams(params)}"
        return await self._request(PROXY_PATH.format(vendor=self.vendor), {"endpoint": endpoint})
