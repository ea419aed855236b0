"""API routes package."""

from .movie_routes import router as movie_router, get_aggregator, get_result_cache
from .health_routes import router as health_router

__all__ = ["movie_router", "health_router", "get_aggregator", "get_result_cache"]
