"""Retry Policy - bounded retry with per-attempt timeout

제공자 호출 하나를 감싸는 재시도 래퍼입니다.
- 시도당 타임아웃 (기본 10초)
- 최대 시도 횟수 (기본 3회)
- 전송 오류, 타임아웃, 2xx 이외 응답이면 재시도
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from moviecompare.core.exceptions import RetryExhaustedException
from moviecompare.core.logging import logger


@dataclass
class RetryPolicy:
    """제한된 재시도 + 시도당 타임아웃

    Usage:
        policy = RetryPolicy(max_attempts=3, timeout_s=10.0)
        response = await policy.execute("cinemaworld:movies", lambda: client.get(url))

    asyncio.CancelledError는 잡지 않으므로 호출자가 취소하면 루프도 즉시 끝납니다.
    """

    max_attempts: int = 3
    timeout_s: float = 10.0
    backoff_s: float = 0.0

    def __post_init__(self):
        """설정 검증"""
        if self.max_attempts <= 0:
            raise ValueError(f"max_attempts must be positive: {self.max_attempts}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive: {self.timeout_s}")
        if self.backoff_s < 0:
            raise ValueError(f"backoff_s must be >= 0: {self.backoff_s}")

    async def execute(
        self,
        operation: str,
        send: Callable[[], Awaitable[httpx.Response]],
    ) -> httpx.Response:
        """send()를 정책에 따라 실행

        Args:
            operation: 로그/예외에 남길 작업 이름
            send: 매 시도마다 새 요청을 만드는 코루틴 팩토리

        Returns:
            httpx.Response: 2xx 응답

        Raises:
            RetryExhaustedException: 모든 시도 실패 (마지막 원인 포함)
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await asyncio.wait_for(send(), timeout=self.timeout_s)
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(
                    f"[RETRY] {operation}: attempt {attempt}/{self.max_attempts} timed out after {self.timeout_s}s"
                )
            except httpx.RequestError as e:
                last_error = e
                logger.warning(
                    f"[RETRY] {operation}: attempt {attempt}/{self.max_attempts} failed: {type(e).__name__}: {e}"
                )
            else:
                if response.is_success:
                    return response
                last_error = httpx.HTTPStatusError(
                    f"Unexpected status {response.status_code}",
                    request=response.request,
                    response=response,
                )
                logger.warning(
                    f"[RETRY] {operation}: attempt {attempt}/{self.max_attempts} got status {response.status_code}"
                )

            if attempt < self.max_attempts and self.backoff_s > 0:
                await asyncio.sleep(self.backoff_s)

        raise RetryExhaustedException(operation, self.max_attempts, last_error)
