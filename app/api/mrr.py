"""MRR API endpoints."""
import asyncio
import logging
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.api.auth import verify_api_key
from app.api.deps import get_http_transport
from app.collectors import AtlassianCollector, ProfitwellCollector
from app.config import Settings, get_settings
from app.errors import DashboardError
from app.metrics import calculate_summary_metrics, combine_mrr_data, parse_breakdowns
from app.models import (
    AtlassianMonthlyData,
    CombinedMonthlyBreakdown,
    MonthlyBreakdown,
    SourceStatus,
    SummaryMetrics,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mrr", tags=["mrr"])

MonthsQuery = Query(None, ge=1, le=36, description="Months to include, ending at the current month")


class CombinedMRRResponse(BaseModel):
    """Combined MRR series with its summary."""
    data: list[CombinedMonthlyBreakdown]
    summary: Optional[SummaryMetrics]
    sources: dict[str, SourceStatus] = {}


class CombineRequest(BaseModel):
    """Breakdown series fetched elsewhere."""
    profitwell: list[Any] = []
    atlassian: list[Any] = []


async def _fetch_series(
    collector_cls: type[ProfitwellCollector] | type[AtlassianCollector],
    settings: Settings,
    http_transport: httpx.AsyncBaseTransport | None,
    months: int,
) -> tuple[list[MonthlyBreakdown], SourceStatus]:
    """Fetch one source, turning its failure into an empty series."""
    try:
        async with collector_cls.from_settings(settings, http_transport) as collector:
            series = await collector.get_mrr_breakdown(months)
    except DashboardError as e:
        logger.warning(f"{collector_cls.name} unavailable, continuing without it: {e}")
        return [], SourceStatus(ok=False, error=str(e))
    return series, SourceStatus(ok=True, records=len(series))


async def _combined(
    settings: Settings,
    http_transport: httpx.AsyncBaseTransport | None,
    months: int,
) -> CombinedMRRResponse:
    (profitwell, profitwell_status), (atlassian, atlassian_status) = await asyncio.gather(
        _fetch_series(ProfitwellCollector, settings, http_transport, months),
        _fetch_series(AtlassianCollector, settings, http_transport, months),
    )
    combined = combine_mrr_data(profitwell, atlassian)
    return CombinedMRRResponse(
        data=combined,
        summary=calculate_summary_metrics(combined),
        sources={"profitwell": profitwell_status, "atlassian": atlassian_status},
    )


@router.get("/profitwell", response_model=list[MonthlyBreakdown])
async def get_profitwell_breakdown(
    months: Optional[int] = MonthsQuery,
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Profitwell MRR breakdown."""
    async with ProfitwellCollector.from_settings(settings, http_transport) as collector:
        return await collector.get_mrr_breakdown(months or settings.default_months)


@router.get("/atlassian", response_model=list[MonthlyBreakdown])
async def get_atlassian_breakdown(
    months: Optional[int] = MonthsQuery,
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Atlassian MRR breakdown computed from marketplace transactions."""
    async with AtlassianCollector.from_settings(settings, http_transport) as collector:
        return await collector.get_mrr_breakdown(months or settings.default_months)


@router.get("/atlassian/monthly", response_model=list[AtlassianMonthlyData])
async def get_atlassian_monthly_data(
    months: Optional[int] = MonthsQuery,
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Atlassian breakdown with per-customer amounts."""
    async with AtlassianCollector.from_settings(settings, http_transport) as collector:
        return await collector.get_monthly_data(months or settings.default_months)


@router.get("/combined", response_model=CombinedMRRResponse)
async def get_combined_mrr(
    months: Optional[int] = MonthsQuery,
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Profitwell and Atlassian merged by month.

    A source that fails is reported in `sources` and treated as empty.
    """
    return await _combined(settings, http_transport, months or settings.default_months)


@router.get("/summary", response_model=Optional[SummaryMetrics])
async def get_mrr_summary(
    months: Optional[int] = MonthsQuery,
    settings: Settings = Depends(get_settings),
    http_transport: httpx.AsyncBaseTransport | None = Depends(get_http_transport),
    _: str = Depends(verify_api_key),
):
    """Summary metrics for the latest month; null when neither source has data."""
    response = await _combined(settings, http_transport, months or settings.default_months)
    return response.summary


@router.post("/combine", response_model=CombinedMRRResponse)
async def combine_breakdowns(
    request: CombineRequest,
    _: str = Depends(verify_api_key),
):
    """Combine two breakdown series supplied by the caller."""
    combined = combine_mrr_data(
        parse_breakdowns(request.profitwell),
        parse_breakdowns(request.atlassian),
    )
    return CombinedMRRResponse(data=combined, summary=calculate_summary_metrics(combined))
