"""Engine Layer - aggregation core

- MovieAggregator: catalog merge and best-price selection over all providers
- ResultCache: TTL cache (in-memory / Redis)
- Cache keys: fixed formats shared by every cache backend
"""

from .aggregator import MovieAggregator, merge_catalogs, parse_price, UNPARSABLE_PRICE
from .cache import (
    CacheEntry,
    InMemoryResultCache,
    RedisResultCache,
    ResultCache,
    create_result_cache,
)
from .cache_keys import ALL_MOVIES_CACHE_KEY, PRICE_CACHE_KEY_PREFIX, generate_price_cache_key

__all__ = [
    "MovieAggregator",
    "merge_catalogs",
    "parse_price",
    "UNPARSABLE_PRICE",
    "ResultCache",
    "CacheEntry",
    "InMemoryResultCache",
    "RedisResultCache",
    "create_result_cache",
    "ALL_MOVIES_CACHE_KEY",
    "PRICE_CACHE_KEY_PREFIX",
    "generate_price_cache_key",
]
