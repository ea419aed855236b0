"""공유 HTTP 클라이언트 (httpx)

- 제공자 호출마다 AsyncClient를 만들면 커넥션 재사용이 안 되므로
  프로세스 단위로 클라이언트를 재사용합니다.
- 앱 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from moviecompare.core.config import settings
from moviecompare.core.logging import logger


class SharedHttpClient:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is not None:
                return self._client
            # 시도당 타임아웃은 RetryPolicy가 관리하고, 여기서는 같은 값으로 상한만 둡니다.
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(settings.provider_timeout_s),
                headers={"Accept": "application/json"},
                follow_redirects=True,
            )
            logger.info("Shared HTTP client created")
            return self._client

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning(f"[HTTP_CLIENT] close failed: {type(e).__name__}: {e}")
            self._client = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()
