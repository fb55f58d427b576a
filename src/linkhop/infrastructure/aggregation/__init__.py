from .quality import estimate_size, normalize_quality
from .unit_aggregator import UnitAggregator

__all__ = ["UnitAggregator", "estimate_size", "normalize_quality"]
