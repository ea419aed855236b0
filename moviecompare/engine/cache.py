"""Result Cache - TTL 캐시 (in-memory / Redis)

Aggregator가 소비하는 단순 get/set 저장소입니다. 비즈니스 로직은 없습니다.
값은 JSON 호환 데이터(dict/list)로 저장하고, 해석은 Aggregator가 합니다.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from moviecompare.core.config import settings
from moviecompare.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)
from moviecompare.core.logging import logger


class ResultCache(Protocol):
    """캐시 프로토콜"""

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl_s: int) -> None:
        ...

    async def health_check(self) -> bool:
        ...

    async def close(self) -> None:
        ...


@dataclass(frozen=True)
class CacheEntry:
    """캐시 항목: 값 + 만료 시각 (clock 기준 초)"""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryResultCache:
    """프로세스 내 TTL 캐시

    - 만료는 조회 시점에 판단 (lazy), 명시적 삭제 없음
    - 항목 단위 통째 교체만 일어나므로 키 하나의 get/set만 원자적이면 충분
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: 현재 시각 함수 (초). 테스트에서 주입
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        if entry.is_expired(self._clock()):
            logger.debug(f"Cache expired for key: {key}")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return entry.value

    async def set(self, key: str, value: Any, ttl_s: int) -> None:
        if ttl_s <= 0:
            raise ValueError(f"ttl_s must be positive: {ttl_s}")
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl_s)
        with self._lock:
            self._entries[key] = entry
        logger.info(f"Cache set for key: {key}, TTL: {ttl_s}s")

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class RedisResultCache:
    """Redis TTL 캐시

    여러 인스턴스가 같은 키 포맷으로 캐시를 공유할 때 사용합니다.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[Redis] = None):
        """
        Args:
            redis_url: Redis URL (없으면 settings.redis_url)
            client: redis.asyncio.Redis 인스턴스 (테스트 주입용)
        """
        if client is not None:
            self.redis_client = client
            return

        url = redis_url or settings.redis_url
        if not url:
            raise CacheConnectionException("redis_url is empty")
        try:
            self.redis_client = Redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        except (RedisError, ValueError) as e:
            logger.error(f"Failed to create Redis client: {e}")
            raise CacheConnectionException(str(e)) from e

    async def get(self, key: str) -> Optional[Any]:
        try:
            cached_data = await self.redis_client.get(key)
        except RedisError as e:
            logger.error(f"Cache read error: {e}")
            raise CacheConnectionException(f"read failed: {e}", {"key": key}) from e

        if not cached_data:
            logger.debug(f"Cache miss for key: {key}")
            return None

        try:
            value = json.loads(cached_data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Failed to deserialize cache: {e}")
            raise CacheSerializationException("get", str(e), {"key": key}) from e

        logger.debug(f"Cache hit for key: {key}")
        return value

    async def set(self, key: str, value: Any, ttl_s: int) -> None:
        try:
            cached_value = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize cache data: {e}")
            raise CacheSerializationException("set", str(e), {"key": key}) from e

        try:
            await self.redis_client.setex(key, ttl_s, cached_value)
        except RedisError as e:
            logger.error(f"Cache write error: {e}")
            raise CacheConnectionException(f"write failed: {e}", {"key": key}) from e
        logger.info(f"Cache set for key: {key}, TTL: {ttl_s}s")

    async def health_check(self) -> bool:
        """Redis 연결 상태 확인"""
        try:
            return bool(await self.redis_client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        try:
            await self.redis_client.aclose()
        except RedisError as e:
            logger.warning(f"Redis close failed: {e}")


def create_result_cache() -> ResultCache:
    """설정(cache_backend)에 맞는 캐시 생성"""
    if settings.cache_backend == "redis":
        logger.info("Using Redis result cache")
        return RedisResultCache()
    logger.info("Using in-memory result cache")
    return InMemoryResultCache()
