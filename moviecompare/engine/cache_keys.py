"""캐시 키 생성

키 포맷은 공유 캐시(Redis)와 호환되도록 고정입니다.
- 카탈로그: "all_movies"
- 가격: "movie_prices_" + 정렬된 로컬 ID들을 "_"로 연결
"""
from typing import Iterable

from moviecompare.schemas.movie_schema import ProviderRef

ALL_MOVIES_CACHE_KEY = "all_movies"
PRICE_CACHE_KEY_PREFIX = "movie_prices_"


def generate_price_cache_key(selectors: Iterable[ProviderRef]) -> str:
    """
    셀렉터 집합으로 가격 캐시 키 생성

    입력 순서, 제공자명 대소문자와 무관하게 같은 집합은 같은 키가 됩니다.

    Args:
        selectors: (제공자명, 로컬 ID) 셀렉터들

    Returns:
        가격 캐시 키
    """
    ids = sorted(selector.id for selector in selectors)
    return f"{PRICE_CACHE_KEY_PREFIX}{'_'.join(ids)}"
