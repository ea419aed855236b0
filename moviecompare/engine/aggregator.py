"""Movie Aggregator - Main Engine Entry Point

Coordinates both queries over all configured providers:
1. Cache lookup
2. Concurrent fan-out to every provider (no short-circuit)
3. Merge (catalog) or lowest-price selection (price)
4. Conditional cache population

Provider failures degrade the result; they never abort a query. The only
failure surfaced to callers is AggregationExhaustedException on the price path.
"""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Sequence

from moviecompare.core.exceptions import (
    AggregationExhaustedException,
    CacheException,
    ProviderException,
    ValidationException,
)
from moviecompare.core.logging import logger
from moviecompare.providers.base import MovieProvider
from moviecompare.schemas.movie_schema import (
    AggregatedMovie,
    BestPrice,
    CatalogEntry,
    DetailRecord,
    ProviderRef,
)

from .cache import ResultCache
from .cache_keys import ALL_MOVIES_CACHE_KEY, generate_price_cache_key

# 파싱 불가 가격은 어떤 실제 가격보다 큼
UNPARSABLE_PRICE = Decimal("Infinity")


def parse_price(raw: Optional[str]) -> Decimal:
    """제공자 가격 문자열 → Decimal

    음수, NaN, 무한대, 형식 오류는 모두 UNPARSABLE_PRICE.
    """
    if raw is None:
        return UNPARSABLE_PRICE
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return UNPARSABLE_PRICE
    if not value.is_finite() or value < 0:
        return UNPARSABLE_PRICE
    return value


def merge_catalogs(catalogs: Iterable[Sequence[CatalogEntry]]) -> list[AggregatedMovie]:
    """제공자별 목록을 제목 기준으로 병합

    Args:
        catalogs: 제공자 선언 순서대로 정렬된 목록들

    Returns:
        제목당 AggregatedMovie 1건. title/year/poster는 처음 만난 항목 기준,
        providers는 제공자 선언 순서의 모든 (제공자, ID) 쌍.
    """
    grouped: dict[str, list[CatalogEntry]] = {}
    for catalog in catalogs:
        for entry in catalog:
            grouped.setdefault(entry.title, []).append(entry)

    merged = []
    for group in grouped.values():
        first = group[0]
        merged.append(
            AggregatedMovie(
                title=first.title,
                year=first.year,
                poster=first.poster,
                providers=[ProviderRef(name=e.provider, id=e.id) for e in group],
            )
        )
    return merged


class MovieAggregator:
    """영화 집계기

    제공자 컬렉션에 대해 제네릭하며, 이름으로 제공자를 특별 취급하지 않습니다
    (셀렉터 라우팅 제외). 호출 간 상태는 캐시뿐입니다.

    동일 키에 대한 동시 캐시 미스는 둘 다 fan-out을 수행할 수 있습니다 (last write wins).
    """

    def __init__(
        self,
        providers: Sequence[MovieProvider],
        cache: ResultCache,
        cache_ttl: int = 300,
    ):
        """
        Args:
            providers: 제공자 목록 (선언 순서가 결과 순서)
            cache: 결과 캐시 (get/set 구현)
            cache_ttl: 캐시 TTL (초)
        """
        if not providers:
            raise ValueError("providers must not be empty")
        if cache is None:
            raise ValueError("cache must not be None")
        if cache_ttl <= 0:
            raise ValueError(f"cache_ttl must be positive: {cache_ttl}")

        self.providers = list(providers)
        self.cache = cache
        self.cache_ttl = cache_ttl

        self._providers_by_name: dict[str, MovieProvider] = {}
        for provider in self.providers:
            key = provider.name.lower()
            if key in self._providers_by_name:
                raise ValueError(f"Duplicate provider name: {provider.name}")
            self._providers_by_name[key] = provider

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    # =========================================================================
    # 전체 영화 목록
    # =========================================================================

    async def list_all_movies(self) -> list[AggregatedMovie]:
        """제공자 통합 영화 목록

        실패한 제공자는 결과에서 빠질 뿐이고, 전부 실패하면 빈 목록을 반환합니다.
        부분 성공 결과도 캐시합니다.
        """
        cached = await self._cache_get(ALL_MOVIES_CACHE_KEY)
        if cached is not None:
            try:
                movies = [AggregatedMovie.model_validate(m) for m in cached]
            except (TypeError, ValueError) as e:
                logger.warning(f"Invalid cached catalog, refetching: {type(e).__name__}: {e}")
            else:
                logger.info("Returning movies from cache")
                return movies

        results = await asyncio.gather(
            *(self._fetch_catalog(provider) for provider in self.providers)
        )
        catalogs = [catalog for catalog in results if catalog is not None]

        if not catalogs:
            logger.warning("No movies retrieved from any provider")
            return []

        if len(catalogs) < len(self.providers):
            logger.warning(
                f"Partial catalog: {len(catalogs)}/{len(self.providers)} providers responded"
            )

        movies = merge_catalogs(catalogs)
        if not movies:
            logger.warning("Providers responded with empty catalogs")
            return []

        await self._cache_set(ALL_MOVIES_CACHE_KEY, [m.model_dump() for m in movies])
        logger.info(f"Aggregated {len(movies)} movies from {len(catalogs)} providers")
        return movies

    async def _fetch_catalog(self, provider: MovieProvider) -> Optional[list[CatalogEntry]]:
        try:
            return await provider.list_catalog()
        except ProviderException as e:
            logger.warning(f"Failed to fetch movies from provider {provider.name}: {e}")
        except Exception as e:
            logger.error(
                f"Unexpected error fetching movies from provider {provider.name}: {type(e).__name__}: {e}",
                exc_info=True,
            )
        return None

    # =========================================================================
    # 최저가
    # =========================================================================

    async def get_best_price(self, selectors: Sequence[ProviderRef]) -> BestPrice:
        """셀렉터 집합의 최저가

        Args:
            selectors: 한 제목에 대한 (제공자명, 로컬 ID) 목록.
                보통 AggregatedMovie.providers 그대로

        Returns:
            BestPrice: 파싱 가능한 가격 중 최솟값 (동률이면 셀렉터 순서상 먼저)

        Raises:
            ValidationException: 셀렉터가 비어있음
            AggregationExhaustedException: 파싱 가능한 가격을 하나도 얻지 못함
        """
        if not selectors:
            raise ValidationException("selectors", "at least one selector is required")

        cache_key = generate_price_cache_key(selectors)
        cached = await self._cache_get(cache_key)
        if cached is not None:
            try:
                best = BestPrice.model_validate(cached)
            except (TypeError, ValueError) as e:
                logger.warning(f"Invalid cached price for {cache_key}, refetching: {e}")
            else:
                logger.info(f"Returning cached price for key: {cache_key}")
                return best

        results = await asyncio.gather(
            *(self._fetch_detail(selector) for selector in selectors)
        )
        records = [record for record in results if record is not None]

        if not records:
            logger.warning(f"No prices retrieved from any provider for key: {cache_key}")
            raise AggregationExhaustedException(
                details={"selectors": [s.model_dump() for s in selectors]}
            )

        # min()은 동률일 때 처음 만난 항목을 반환 → 셀렉터 순서상 안정적
        winner = min(records, key=lambda r: parse_price(r.price))
        if parse_price(winner.price) == UNPARSABLE_PRICE:
            logger.warning(f"No parsable price from any provider for key: {cache_key}")
            raise AggregationExhaustedException(
                "Unable to retrieve a valid price from any provider",
                details={"prices": {r.provider: r.price for r in records}},
            )

        best = BestPrice(provider=winner.provider, price=winner.price)

        usable = sum(1 for r in records if parse_price(r.price) != UNPARSABLE_PRICE)
        if usable == len(selectors):
            await self._cache_set(cache_key, best.model_dump())
        else:
            logger.info(
                f"Partial price result not cached: {usable}/{len(selectors)} selectors usable, key={cache_key}"
            )

        return best

    async def _fetch_detail(self, selector: ProviderRef) -> Optional[DetailRecord]:
        provider = self._providers_by_name.get(selector.name.lower())
        if provider is None:
            logger.warning(f"No provider configured for '{selector.name}', skipping id={selector.id}")
            return None

        try:
            return await provider.get_detail(selector.id)
        except ProviderException as e:
            logger.warning(
                f"Failed to fetch movie details from provider {provider.name} for ID {selector.id}: {e}"
            )
        except Exception as e:
            logger.error(
                f"Unexpected error fetching details from provider {provider.name} for ID {selector.id}: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )
        return None

    # =========================================================================
    # 캐시 (실패해도 조회는 계속)
    # =========================================================================

    async def _cache_get(self, key: str) -> Optional[Any]:
        try:
            return await self.cache.get(key)
        except CacheException as e:
            logger.warning(f"Cache lookup failed: {e}")
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            await self.cache.set(key, value, self.cache_ttl)
        except CacheException as e:
            logger.warning(f"Failed to save to cache: {e}")
