"""Shared API dependencies."""
import httpx


def get_http_transport() -> httpx.AsyncBaseTransport | None:
    """Transport handed to vendor HTTP clients; None uses httpx's default."""
    return None
