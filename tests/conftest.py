"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 제공자/캐시/시계 주입
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from moviecompare.engine.cache import InMemoryResultCache  # noqa: E402
from tests.fixtures.providers import FakeClock, FakeProvider  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(fake_clock: FakeClock) -> InMemoryResultCache:
    return InMemoryResultCache(clock=fake_clock)


@pytest.fixture
def cinemaworld() -> FakeProvider:
    return FakeProvider(name="cinemaworld", id_prefix="cw")


@pytest.fixture
def filmworld() -> FakeProvider:
    return FakeProvider(name="filmworld", id_prefix="fw")
