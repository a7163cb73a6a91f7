"""Pytest configuration and fixtures."""
import os

# Required by Settings; must be set before the application is imported
os.environ.setdefault("API_SECRET_KEY", "test-secret")

from typing import Any, Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.config import Settings, get_settings  # noqa: E402

API_KEY = "test-secret"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test gets settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings with every vendor configured for direct access."""
    return Settings(
        _env_file=None,
        api_secret_key=API_KEY,
        profitwell_api_key="pw-test-key",
        atlassian_email="billing@example.com",
        atlassian_api_token="atl-token",
        atlassian_vendor_id="1221976",
        mercury_api_key="mercury-key",
        proxy_base_url=None,
    )


@pytest.fixture
def vendor_routes() -> dict[str, Any]:
    """Fake vendor responses keyed by "host/path".

    Values are JSON bodies, `httpx.Response` objects, or callables taking
    the request.
    """
    return {}


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def mock_transport(vendor_routes, requests_seen) -> httpx.MockTransport:
    """httpx transport answering from `vendor_routes`."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        route = vendor_routes.get(f"{request.url.host}{request.url.path}")
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_transaction() -> Callable[..., dict]:
    """Build an Atlassian transactions-export record."""

    def _make(
        customer: str,
        sale_date: str,
        sale_type: str = "New",
        billing_period: str = "Monthly",
        price: float = 100.0,
        old_price: float | None = None,
    ) -> dict:
        details = {
            "saleDate": sale_date,
            "saleType": sale_type,
            "billingPeriod": billing_period,
            "purchasePrice": price,
        }
        if old_price is not None:
            details["oldPurchasePrice"] = old_price
        return {"cloudId": customer, "purchaseDetails": details}

    return _make


@pytest.fixture
def make_breakdown() -> Callable[..., dict]:
    """Build a MonthlyBreakdown payload; total and arr follow the movement fields."""

    def _make(month: str, total_mrr: float | None = None, **fields) -> dict:
        record = {
            "date": month,
            "new_revenue": 0.0,
            "reactivations": 0.0,
            "upgrades": 0.0,
            "downgrades": 0.0,
            "voluntary_churn": 0.0,
            "delinquent_churn": 0.0,
            "existing": 0.0,
            **fields,
        }
        if total_mrr is None:
            total_mrr = sum(value for key, value in record.items() if key != "date")
        record["total_mrr"] = total_mrr
        record["arr"] = total_mrr * 12
        return record

    return _make
