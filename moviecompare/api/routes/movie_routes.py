"""Movie Routes - HTTP Layer

HTTP 요청을 MovieAggregator로 위임하는 단순한 Translator 역할만 수행합니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from moviecompare.core.config import settings
from moviecompare.core.exceptions import AggregationExhaustedException, ValidationException
from moviecompare.core.logging import logger
from moviecompare.engine import MovieAggregator, ResultCache, create_result_cache
from moviecompare.providers import RetryPolicy, build_providers
from moviecompare.schemas.movie_schema import AggregatedMovie, BestPrice, BestPriceRequest

router = APIRouter(prefix="/api", tags=["movies"])

# 싱글톤 서비스
_result_cache: Optional[ResultCache] = None
_aggregator: Optional[MovieAggregator] = None


def get_result_cache() -> ResultCache:
    """ResultCache 싱글톤"""
    global _result_cache
    if _result_cache is None:
        _result_cache = create_result_cache()
    return _result_cache


def get_aggregator(
    cache: ResultCache = Depends(get_result_cache),
) -> MovieAggregator:
    """MovieAggregator 싱글톤

    Raises:
        ConfigurationException: 제공자 설정 누락
    """
    global _aggregator
    if _aggregator is None:
        retry_policy = RetryPolicy(
            max_attempts=settings.provider_max_attempts,
            timeout_s=settings.provider_timeout_s,
            backoff_s=settings.provider_retry_backoff_s,
        )
        providers = build_providers(
            settings.enabled_providers,
            settings.provider_base_url,
            settings.provider_api_token,
            retry_policy=retry_policy,
        )
        _aggregator = MovieAggregator(
            providers=providers,
            cache=cache,
            cache_ttl=settings.cache_ttl,
        )
        logger.info(f"Aggregator ready: providers={_aggregator.provider_names}")
    return _aggregator


async def shutdown_services() -> None:
    """싱글톤 정리 (앱 종료 시)"""
    global _result_cache, _aggregator
    if _result_cache is not None:
        await _result_cache.close()
    _result_cache = None
    _aggregator = None


@router.get("/movies", response_model=List[AggregatedMovie])
async def get_movies(aggregator: MovieAggregator = Depends(get_aggregator)):
    """전체 영화 목록 (제공자 통합, 제목 기준 중복 제거)

    제공자가 모두 실패하면 빈 목록을 반환합니다.
    """
    try:
        return await aggregator.list_all_movies()
    except Exception as e:
        logger.error(f"[API] Error retrieving movies: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="An error occurred while retrieving movies")


@router.post("/movies/prices", response_model=BestPrice)
async def get_movie_prices(
    request: BestPriceRequest,
    aggregator: MovieAggregator = Depends(get_aggregator),
):
    """셀렉터 집합에 대한 최저가

    Flow:
        1. 요청 검증 (셀렉터 1개 이상)
        2. Aggregator에 위임 (Cache → Fan-out → Select)
        3. 사용 가능한 가격이 없으면 404
    """
    logger.info(f"[API] Price request: selectors={len(request.providers)}")
    try:
        return await aggregator.get_best_price(request.providers)
    except ValidationException as e:
        logger.warning(f"[API] Invalid price request: {e}")
        raise HTTPException(status_code=400, detail=e.message)
    except AggregationExhaustedException as e:
        logger.warning(f"[API] Unable to retrieve prices: {e}")
        raise HTTPException(status_code=404, detail="No prices available for the specified providers")
    except Exception as e:
        logger.error(f"[API] Error retrieving movie prices: {type(e).__name__}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="An error occurred while retrieving movie prices")
