"""API 엔드포인트 패키지 - export only."""

from .routes import movie_router, health_router, get_aggregator, get_result_cache

__all__ = ["movie_router", "health_router", "get_aggregator", "get_result_cache"]
