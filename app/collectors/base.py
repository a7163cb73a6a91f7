"""Base collector class."""
import logging
from abc import ABC, abstractmethod
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.collectors.transport import DirectTransport, ProxyTransport, Transport
from app.config import Settings
from app.errors import InvalidPayloadError, VendorAPIError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseCollector(ABC):
    """Base class for vendor data collectors."""

    name: str = "base"
    BASE_URL: str = ""

    def __init__(self, transport: Transport):
        self.transport = transport

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.transport.aclose()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Build a collector, proxied when `proxy_base_url` is configured."""
        options = cls.options(settings)
        if settings.use_proxy:
            transport = ProxyTransport(
                cls.name,
                settings.proxy_base_url,
                settings.api_secret_key,
                timeout=settings.request_timeout,
                transport=http_transport,
            )
        else:
            transport = cls.direct_transport(settings, http_transport)
        return cls(transport, **options)

    @classmethod
    @abstractmethod
    def direct_transport(
        cls,
        settings: Settings,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> DirectTransport:
        """Authenticated transport for the vendor API.

        Raises VendorNotConfiguredError when credentials are missing.
        """

    @classmethod
    def options(cls, settings: Settings) -> dict[str, Any]:
        """Extra constructor arguments taken from settings."""
        return {}

    async def fetch_json(self, endpoint: str, **params) -> Any:
        """Fetch JSON from a vendor endpoint, logging failures."""
        try:
            return await self.transport.get_json(endpoint, params or None)
        except VendorAPIError as e:
            logger.error(f"Error fetching {self.name} {endpoint}: {e.message}")
            raise

    def parse_list(self, model: type[ModelT], items: Any) -> list[ModelT]:
        """Validate a list payload into models."""
        if not isinstance(items, list):
            raise InvalidPayloadError(
                f"{self.name}: expected a list, got {type(items).__name__}"
            )
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            raise InvalidPayloadError(f"Invalid {self.name} payload", errors=errors) from e
