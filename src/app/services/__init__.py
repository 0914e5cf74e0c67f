from . import invoice_filter
from .invoice_filter import FilterCriteria
from .aggregation_cache import AggregationCache, CacheKey, MISS

__all__ = [
    "invoice_filter",
    "FilterCriteria",
    "AggregationCache",
    "CacheKey",
    "MISS",
]
