"""Exception types shared by collectors, calculators and the API."""
from typing import Any


class DashboardError(Exception):
    """Base class for errors raised by this service."""


class InvalidPayloadError(DashboardError):
    """A payload or request body does not have the expected shape.

    An empty list is valid input ("no data") and never raises this.
    """

    def __init__(self, message: str, errors: list[Any] | None = None):
        super().__init__(message)
        self.errors = errors or []


class VendorAPIError(DashboardError):
    """A request to a vendor API failed."""

    def __init__(
        self,
        vendor: str,
        message: str,
        status_code: int | None = None,
        details: str | None = None,
    ):
        super().__init__(f"{vendor}: {message}")
        self.vendor = vendor
        self.message = message
        self.status_code = status_code
        self.details = details


class VendorNotConfiguredError(VendorAPIError):
    """Credentials for a vendor are missing."""

    def __init__(self, vendor: str):
        super().__init__(vendor, "credentials not configured")
