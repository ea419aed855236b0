"""Provider Protocol - Interface for upstream movie providers

Defines the capability every upstream movie source must implement.
"""

from typing import Protocol

from moviecompare.schemas.movie_schema import CatalogEntry, DetailRecord


class MovieProvider(Protocol):
    """영화 제공자 프로토콜

    Aggregator는 이 인터페이스만 알고, 제공자 이름으로 분기하지 않습니다
    (셀렉터 라우팅 제외).

    구현 예시:
        class CinemaWorldProvider(HttpMovieProvider):
            name = "cinemaworld"
            id_prefix = "cw"
    """

    name: str
    id_prefix: str

    def to_local_id(self, canonical_id: str) -> str:
        """정규 ID → 제공자 로컬 ID (접두사 부착)"""
        ...

    def to_canonical_id(self, local_id: str) -> str:
        """제공자 로컬 ID → 정규 ID (접두사 제거)"""
        ...

    async def list_catalog(self) -> list[CatalogEntry]:
        """제공자 전체 영화 목록

        Raises:
            ProviderException: 전송/재시도 소진/디코딩 실패
        """
        ...

    async def get_detail(self, canonical_id: str) -> DetailRecord:
        """단일 영화 상세 (가격 포함)

        Raises:
            ProviderException: 전송/재시도 소진/디코딩 실패
        """
        ...
