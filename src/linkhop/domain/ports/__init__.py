from .hop_resolver import HopResolverPort
from .link_classifier import LinkClassifierPort, UnitAggregatorPort
from .page_fetcher import PageFetcherPort
from .routing_codec import RoutingCodecPort

__all__ = [
    "HopResolverPort",
    "LinkClassifierPort",
    "PageFetcherPort",
    "RoutingCodecPort",
    "UnitAggregatorPort",
]
