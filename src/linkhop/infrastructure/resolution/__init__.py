from .hop_resolver import HopResolver
from .page_fetcher import HttpxPageFetcher
from .strategies import NamedStrategy, build_strategies, extract_next_url

__all__ = [
    "HopResolver",
    "HttpxPageFetcher",
    "NamedStrategy",
    "build_strategies",
    "extract_next_url",
]
