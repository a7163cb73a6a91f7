"""Collectors for the vendor APIs."""
from app.collectors.base import BaseCollector
from app.collectors.transport import DirectTransport, ProxyTransport, Transport
from app.collectors.profitwell import ProfitwellCollector
from app.collectors.atlassian import AtlassianCollector
from app.collectors.mercury import MercuryCollector

COLLECTORS: dict[str, type[BaseCollector]] = {
    ProfitwellCollector.name: ProfitwellCollector,
    AtlassianCollector.name: AtlassianCollector,
    MercuryCollector.name: MercuryCollector,
}

__all__ = [
    "BaseCollector",
    "Transport",
    "DirectTransport",
    "ProxyTransport",
    "ProfitwellCollector",
    "AtlassianCollector",
    "MercuryCollector",
    "COLLECTORS",
]
