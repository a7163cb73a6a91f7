"""Vendor collector tests against a mocked HTTP transport."""
import base64
import logging
from datetime import date
from urllib.parse import parse_qs

import httpx
import pytest

from app.collectors import AtlassianCollector, MercuryCollector, ProfitwellCollector
from app.collectors.profitwell import transform_monthly_metrics
from app.errors import InvalidPayloadError, VendorAPIError, VendorNotConfiguredError

PROFITWELL_METRICS = "api.profitwell.com/v2/metrics/monthly/"
ATLASSIAN_TRANSACTIONS = "marketplace.atlassian.com/rest/2/vendors/1221976/reporting/sales/transactions/export"
ATLASSIAN_CHURN = "marketplace.atlassian.com/rest/2/vendors/1221976/reporting/sales/metrics/churn/details/export"
MERCURY_ACCOUNTS = "api.mercury.com/api/v1/accounts"


def monthly_metrics(months, **series):
    """Profitwell monthly metrics payload with one point per month."""
    data = {name: [{"date": m, "value": v} for m, v in zip(months, values)] for name, values in series.items()}
    return {"data": data}


class TestProfitwellCollector:
    """Profitwell monthly metrics."""

    def test_transform_takes_last_months(self):
        """Only the trailing N months are kept, aligned by index."""
        payload = monthly_metrics(
            ["2024-03", "2024-04", "2024-05"],
            recurring_revenue=[900, 1000, 1100],
            new_recurring_revenue=[50, 60, 70],
            churned_recurring_revenue_cancellations=[-10, -20, -30],
            existing_recurring_revenue=[850, 960, 1060],
        )

        breakdowns = transform_monthly_metrics(payload, months=2)

        assert [b.date for b in breakdowns] == ["2024-04", "2024-05"]
        assert breakdowns[-1].total_mrr == 1100
        assert breakdowns[-1].arr == 13200
        assert breakdowns[-1].new_revenue == 70
        assert breakdowns[-1].voluntary_churn == -30
        assert breakdowns[-1].reactivations == 0

    def test_transform_empty_payload(self):
        """Missing data gives no breakdowns."""
        assert transform_monthly_metrics({}, months=6) == []

    def test_transform_skips_malformed_months(self, caplog):
        """Non-numeric values and bad dates drop only their month."""
        payload = monthly_metrics(
            ["2024-03", "April 2024", "2024-05"],
            recurring_revenue=[900, 1000, 1100],
            new_recurring_revenue=[50, 60, "n/a"],
        )

        with caplog.at_level(logging.WARNING, logger="app.collectors.profitwell"):
            breakdowns = transform_monthly_metrics(payload, months=3)

        assert [b.date for b in breakdowns] == ["2024-03"]
        assert "Skipping malformed Profitwell month #1" in caplog.text
        assert "Skipping malformed Profitwell month #2" in caplog.text

    def test_transform_wrong_shape(self):
        """Series that are not lists are a payload error."""
        with pytest.raises(InvalidPayloadError):
            transform_monthly_metrics({"data": {"recurring_revenue": {"2024-05": 1}}})
        with pytest.raises(InvalidPayloadError):
            transform_monthly_metrics({"data": ["2024-05"]})

    @pytest.mark.asyncio
    async def test_direct_request_is_authenticated(self, settings, mock_transport, vendor_routes, requests_seen):
        """The raw API key is sent as Authorization."""
        vendor_routes[PROFITWELL_METRICS] = monthly_metrics(["2024-06"], recurring_revenue=[500])

        async with ProfitwellCollector.from_settings(settings, mock_transport) as collector:
            breakdowns = await collector.get_mrr_breakdown(months=6)

        assert [b.total_mrr for b in breakdowns] == [500]
        assert requests_seen[0].headers["Authorization"] == "pw-test-key"
        assert requests_seen[0].headers["User-Agent"].startswith("revenue-intel/")

    @pytest.mark.asyncio
    async def test_vendor_error_is_raised(self, settings, mock_transport, vendor_routes):
        """HTTP errors surface as VendorAPIError with the vendor's message."""
        vendor_routes[PROFITWELL_METRICS] = httpx.Response(401, json={"message": "Bad token"})

        async with ProfitwellCollector.from_settings(settings, mock_transport) as collector:
            with pytest.raises(VendorAPIError) as excinfo:
                await collector.get_monthly_metrics()

        assert excinfo.value.status_code == 401
        assert excinfo.value.message == "Bad token"
        assert excinfo.value.vendor == "profitwell"

    @pytest.mark.asyncio
    async def test_invalid_json(self, settings, mock_transport, vendor_routes):
        """A non-JSON body is a vendor error."""
        vendor_routes[PROFITWELL_METRICS] = httpx.Response(200, text="<html>oops</html>")

        async with ProfitwellCollector.from_settings(settings, mock_transport) as collector:
            with pytest.raises(VendorAPIError, match="Invalid JSON"):
                await collector.get_monthly_metrics()

    @pytest.mark.asyncio
    async def test_connection_error(self, settings):
        """Transport failures are wrapped too."""

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with ProfitwellCollector.from_settings(settings, httpx.MockTransport(refuse)) as collector:
            with pytest.raises(VendorAPIError, match="connection refused"):
                await collector.get_monthly_metrics()

    def test_not_configured(self, settings):
        """Direct mode without an API key is refused up front."""
        settings = settings.model_copy(update={"profitwell_api_key": ""})
        with pytest.raises(VendorNotConfiguredError):
            ProfitwellCollector.from_settings(settings)


class TestAtlassianCollector:
    """Atlassian transactions to MRR breakdowns."""

    @pytest.mark.asyncio
    async def test_breakdown_from_transactions(
        self, settings, mock_transport, vendor_routes, requests_seen, make_transaction,
    ):
        """Transactions are normalized, classified and assembled."""
        vendor_routes[ATLASSIAN_TRANSACTIONS] = [
            make_transaction("cloud-1", "2024-05-03", "New", price=100.0),
            make_transaction("cloud-1", "2024-06-03", "Renewal", price=100.0),
            make_transaction("cloud-1", "2024-06-10", "Upgrade", price=150.0, old_price=100.0),
            make_transaction("cloud-2", "2024-05-20", "New", price=40.0),
            make_transaction("cloud-3", "2024-06-01", billing_period="Annual", price=1200.0),
            make_transaction("cloud-4", "garbage", "New", price=999.0),
        ]

        async with AtlassianCollector.from_settings(settings, mock_transport) as collector:
            may, june = await collector.get_mrr_breakdown(months=2, today=date(2024, 6, 15))

        assert may.date == "2024-05"
        assert may.new_revenue == 140
        assert june.new_revenue == pytest.approx(100)
        assert june.upgrades == 50
        assert june.existing == 100
        assert june.voluntary_churn == -40
        assert june.total_mrr == pytest.approx(250)

        expected = base64.b64encode(b"billing@example.com:atl-token").decode()
        assert requests_seen[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_monthly_data(self, settings, mock_transport, vendor_routes, make_transaction):
        """Per-customer maps come along with the breakdown."""
        vendor_routes[ATLASSIAN_TRANSACTIONS] = [make_transaction("cloud-1", "2024-06-03", price=25.0)]

        async with AtlassianCollector.from_settings(settings, mock_transport) as collector:
            [june] = await collector.get_monthly_data(months=1, today=date(2024, 6, 30))

        assert june.new_customers == {"cloud-1": 25.0}

    @pytest.mark.asyncio
    async def test_churn_events(self, settings, mock_transport, vendor_routes):
        """Churn details are parsed from either payload shape."""
        vendor_routes[ATLASSIAN_CHURN] = {
            "churnEvents": [{"cloudId": "cloud-9", "churnDate": "2024-05-31", "lastPurchasePrice": 40}],
        }

        async with AtlassianCollector.from_settings(settings, mock_transport) as collector:
            [event] = await collector.get_churn_events()

        assert event.customer_id == "cloud-9"
        assert event.last_purchase_price == 40

    @pytest.mark.asyncio
    async def test_transactions_wrong_shape(self, settings, mock_transport, vendor_routes):
        """An object where a list is expected is a payload error."""
        vendor_routes[ATLASSIAN_TRANSACTIONS] = {"unexpected": True}

        async with AtlassianCollector.from_settings(settings, mock_transport) as collector:
            with pytest.raises(InvalidPayloadError):
                await collector.get_transactions()

    def test_vendor_id_required(self, settings):
        """The vendor id is needed even when proxied."""
        settings = settings.model_copy(update={"atlassian_vendor_id": "", "proxy_base_url": "http://proxy"})
        with pytest.raises(VendorNotConfiguredError):
            AtlassianCollector.from_settings(settings)


class TestMercuryCollector:
    """Mercury balances and burn."""

    @pytest.mark.asyncio
    async def test_token_prefix_added(self, settings, mock_transport, vendor_routes, requests_seen):
        """The secret-token: prefix is added when missing."""
        vendor_routes[MERCURY_ACCOUNTS] = {"accounts": []}

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            await collector.get_accounts()

        assert requests_seen[0].headers["Authorization"] == "Bearer secret-token:mercury-key"

    @pytest.mark.asyncio
    async def test_token_prefix_not_doubled(self, settings, mock_transport, vendor_routes, requests_seen):
        """A key that already has the prefix is used as-is."""
        settings = settings.model_copy(update={"mercury_api_key": "secret-token:abc"})
        vendor_routes[MERCURY_ACCOUNTS] = {"accounts": []}

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            await collector.get_accounts()

        assert requests_seen[0].headers["Authorization"] == "Bearer secret-token:abc"

    @pytest.mark.asyncio
    async def test_bank_balances(self, settings, mock_transport, vendor_routes):
        """One balance per account, from the available balance."""
        vendor_routes[MERCURY_ACCOUNTS] = {"accounts": [
            {"id": "acc-1", "name": "Checking", "availableBalance": 1500.5, "currentBalance": 1600, "currency": "USD"},
        ]}

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            [balance] = await collector.get_bank_balances()

        assert balance.source == "mercury"
        assert balance.account_name == "Checking"
        assert balance.balance == 1500.5

    @pytest.mark.asyncio
    async def test_account_statement(self, settings, mock_transport, vendor_routes, requests_seen):
        """Statements are fetched by account and statement date."""
        statement = {"id": "stmt-1", "startDate": "2024-05-01", "endDate": "2024-05-31"}
        vendor_routes["api.mercury.com/api/v1/accounts/acc-1/statements/2024-05-31"] = statement

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            result = await collector.get_account_statement("acc-1", "2024-05-31")

        assert result == statement
        assert requests_seen[0].url.path == "/api/v1/accounts/acc-1/statements/2024-05-31"

    @pytest.mark.asyncio
    async def test_accounts_wrong_shape(self, settings, mock_transport, vendor_routes):
        """A list where an object is expected is a payload error."""
        vendor_routes[MERCURY_ACCOUNTS] = [{"id": "acc-1", "name": "Checking"}]

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            with pytest.raises(InvalidPayloadError):
                await collector.get_accounts()

    @pytest.mark.asyncio
    async def test_transactions_wrong_shape(self, settings, mock_transport, vendor_routes):
        """Transactions must come wrapped in an object too."""
        vendor_routes["api.mercury.com/api/v1/account/acc-1/transactions"] = [{"id": "tx-1", "amount": 5}]

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            with pytest.raises(InvalidPayloadError):
                await collector.get_transactions("acc-1")

    @pytest.mark.asyncio
    async def test_burn_rate(self, settings, mock_transport, vendor_routes, requests_seen):
        """Each month queries every account for its date range."""
        vendor_routes[MERCURY_ACCOUNTS] = {"accounts": [
            {"id": "acc-1", "name": "Checking"},
            {"id": "acc-2", "name": "Savings"},
        ]}

        def transactions(request):
            start = request.url.params["start"]
            return {"transactions": [
                {"id": f"tx-{start}", "amount": 100, "kind": "debit", "description": "GitHub"},
            ]}

        vendor_routes["api.mercury.com/api/v1/account/acc-1/transactions"] = transactions
        vendor_routes["api.mercury.com/api/v1/account/acc-2/transactions"] = httpx.Response(500, json={})

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            metrics = await collector.get_burn_rate_metrics(months=2, today=date(2024, 3, 10))

        assert [m.period for m in metrics] == ["2024-02", "2024-03"]
        assert [m.total_burn for m in metrics] == [100, 100]
        assert metrics[0].category_breakdown == {"Software & Tools": 100}

        february = [r for r in requests_seen if r.url.params.get("start") == "2024-02-01"][0]
        assert february.url.params["end"] == "2024-02-29"
        assert february.url.params["order"] == "desc"
        assert february.url.params["limit"] == "1000"


class TestProxyTransport:
    """Collectors configured to go through another instance."""

    @pytest.mark.asyncio
    async def test_requests_go_through_proxy_route(self, settings, mock_transport, vendor_routes, requests_seen):
        """Vendor path and query travel in the endpoint parameter."""
        settings = settings.model_copy(update={"proxy_base_url": "http://dashboard.internal", "mercury_api_key": ""})
        vendor_routes["dashboard.internal/api/v1/proxy/mercury"] = {"transactions": []}

        async with MercuryCollector.from_settings(settings, mock_transport) as collector:
            await collector.get_transactions("acc-1", start=date(2024, 6, 1), end=date(2024, 6, 30))

        request = requests_seen[0]
        assert request.headers["X-API-Key"] == "test-secret"
        assert "Authorization" not in request.headers
        endpoint = request.url.params["endpoint"]
        path, query = endpoint.split("?", 1)
        assert path == "/account/acc-1/transactions"
        assert parse_qs(query) == {"order": ["desc"], "start": ["2024-06-01"], "end": ["2024-06-30"]}

    @pytest.mark.asyncio
    async def test_proxy_error_detail(self, settings, mock_transport, vendor_routes):
        """Errors from the proxy keep its detail message."""
        settings = settings.model_copy(update={"proxy_base_url": "http://dashboard.internal"})
        vendor_routes["dashboard.internal/api/v1/proxy/profitwell"] = httpx.Response(
            503, json={"detail": "profitwell is not configured"},
        )

        async with ProfitwellCollector.from_settings(settings, mock_transport) as collector:
            with pytest.raises(VendorAPIError) as excinfo:
                await collector.get_monthly_metrics()

        assert excinfo.value.status_code == 503
        assert excinfo.value.message == "profitwell is not configured"
