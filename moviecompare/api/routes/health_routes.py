"""헬스 체크 엔드포인트"""
from fastapi import APIRouter, Depends
from datetime import datetime
from typing import Optional

from moviecompare import __version__
from moviecompare.api.routes.movie_routes import get_result_cache
from moviecompare.core.config import settings
from moviecompare.core.exceptions import CacheException
from moviecompare.core.logging import logger
from moviecompare.engine import ResultCache
from moviecompare.schemas.movie_schema import HealthResponse

router = APIRouter(tags=["health"])


def get_health_cache() -> Optional[ResultCache]:
    """헬스 체크용 캐시 (생성 실패 시 None)"""
    try:
        return get_result_cache()
    except CacheException as e:
        logger.warning(f"Cache unavailable for health check: {e}")
        return None


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: Optional[ResultCache] = Depends(get_health_cache)):
    """
    헬스 체크 엔드포인트

    - 서버 상태
    - 캐시 연결 상태
    - 설정된 제공자 목록
    """
    cache_ok = False
    try:
        if cache is not None:
            cache_ok = await cache.health_check()
    except CacheException as e:
        logger.warning(f"Cache health check failed: {e.error_code}")
        cache_ok = False
    except Exception as e:
        logger.error(f"Unexpected cache error: {e}")
        cache_ok = False

    providers_configured = bool(settings.provider_base_url and settings.provider_api_token)
    status = "ok" if cache_ok and providers_configured else "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(),
        version=__version__,
        cache=settings.cache_backend if cache_ok else "unavailable",
        providers=list(settings.enabled_providers) if providers_configured else [],
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": settings.api_title,
        "version": __version__,
        "docs": "/docs"
    }
