"""HTTP 영화 제공자 (cinemaworld / filmworld)

두 제공자는 같은 API 형식을 쓰고 이름과 ID 접두사만 다릅니다.
- 목록: GET {base}/api/{name}/movies
- 상세: GET {base}/api/{name}/movie/{prefix}{id}
- 인증: x-access-token 헤더
"""

from __future__ import annotations

from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from moviecompare.core.exceptions import (
    ConfigurationException,
    ProviderException,
    RetryExhaustedException,
)
from moviecompare.core.logging import logger
from moviecompare.schemas.movie_schema import CatalogEntry, DetailRecord

from .http_client import get_shared_http_client
from .retry import RetryPolicy


class ExternalMovie(BaseModel):
    """제공자 목록 응답의 영화 1건"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field("", alias="ID")
    title: str = Field("", alias="Title")
    year: str = Field("", alias="Year")
    type: Optional[str] = Field(None, alias="Type")
    poster: str = Field("", alias="Poster")

    @field_validator("id", "title", "year", "poster", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> Any:
        return str(v) if isinstance(v, (int, float)) else v


class ExternalMoviesListResponse(BaseModel):
    """제공자 목록 응답"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # 항목 단위로 검증 (한 건이 잘못돼도 나머지는 살림)
    movies: List[Any] = Field(..., alias="Movies")


class ExternalMovieDetailsResponse(ExternalMovie):
    """제공자 상세 응답 (가격 포함)"""

    price: str = Field("", alias="Price")

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, v: Any) -> Any:
        # 제공자에 따라 숫자로 내려오기도 함. 원본 문자열 형태로 보존
        if v is None:
            return ""
        return str(v) if isinstance(v, (int, float)) else v


class HttpMovieProvider:
    """HTTP 기반 영화 제공자

    모든 호출은 RetryPolicy로 감싸고, 실패는 ProviderException 하나로 변환합니다.
    """

    name: str = ""
    id_prefix: str = ""

    def __init__(
        self,
        base_url: str,
        api_token: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        retry_policy: Optional[RetryPolicy] = None,
        name: Optional[str] = None,
        id_prefix: Optional[str] = None,
    ):
        """
        Args:
            base_url: 제공자 API 베이스 URL
            api_token: x-access-token 값
            client: httpx.AsyncClient (없으면 공유 클라이언트 사용)
            retry_policy: 재시도 정책 (없으면 기본값)
            name: 제공자명 (서브클래스 기본값 덮어쓰기)
            id_prefix: ID 접두사 (서브클래스 기본값 덮어쓰기)
        """
        if name is not None:
            self.name = name
        if id_prefix is not None:
            self.id_prefix = id_prefix
        if not self.name:
            raise ValueError("provider name must not be empty")

        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self._client = client
        self.retry_policy = retry_policy or RetryPolicy()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, prefix={self.id_prefix!r})"

    # =========================================================================
    # ID 변환
    # =========================================================================

    def to_local_id(self, canonical_id: str) -> str:
        return f"{self.id_prefix}{canonical_id}"

    def to_canonical_id(self, local_id: str) -> str:
        if self.id_prefix and local_id.startswith(self.id_prefix):
            return local_id[len(self.id_prefix):]
        return local_id

    # =========================================================================
    # 제공자 호출
    # =========================================================================

    async def list_catalog(self) -> list[CatalogEntry]:
        path = f"/api/{self.name}/movies"
        try:
            response = await self._get(path)
            payload = ExternalMoviesListResponse.model_validate(response.json())
        except (RetryExhaustedException, httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching movies from {self.name}: {type(e).__name__}: {e}")
            raise ProviderException(self.name, e) from e

        entries = []
        for item in payload.movies:
            try:
                m = ExternalMovie.model_validate(item)
            except ValidationError as e:
                logger.warning(f"[{self.name}] skipping malformed catalog item: {e.error_count()} error(s)")
                continue
            canonical_id = self.to_canonical_id(m.id).strip()
            if not canonical_id or not m.title.strip():
                logger.warning(f"[{self.name}] skipping catalog item without id/title: {m.id!r}")
                continue
            entries.append(
                CatalogEntry(
                    id=canonical_id,
                    title=m.title,
                    year=m.year,
                    poster=m.poster,
                    provider=self.name,
                )
            )
        logger.debug(f"[{self.name}] catalog fetched: {len(entries)} movies")
        return entries

    async def get_detail(self, canonical_id: str) -> DetailRecord:
        # 요청 본문에서 온 ID이므로 경로 한 구간으로만 쓰이도록 인코딩
        path = f"/api/{self.name}/movie/{quote(self.to_local_id(canonical_id), safe='')}"
        try:
            response = await self._get(path)
            payload = ExternalMovieDetailsResponse.model_validate(response.json())
        except (RetryExhaustedException, httpx.HTTPError, ValueError) as e:
            logger.error(
                f"Error fetching movie details from {self.name} for id={canonical_id}: {type(e).__name__}: {e}"
            )
            raise ProviderException(self.name, e, {"provider": self.name, "id": canonical_id}) from e

        return DetailRecord(
            id=self.to_canonical_id(payload.id) or canonical_id,
            title=payload.title,
            year=payload.year,
            poster=payload.poster,
            type=payload.type,
            price=payload.price,
            provider=self.name,
        )

    async def _get(self, path: str) -> httpx.Response:
        client = self._client or await get_shared_http_client().get_client()
        url = f"{self.base_url}{path}"
        headers = {"x-access-token": self.api_token}
        return await self.retry_policy.execute(
            f"{self.name}:GET {path}",
            lambda: client.get(url, headers=headers),
        )


class CinemaWorldProvider(HttpMovieProvider):
    name = "cinemaworld"
    id_prefix = "cw"


class FilmWorldProvider(HttpMovieProvider):
    name = "filmworld"
    id_prefix = "fw"


PROVIDER_CLASSES: dict[str, type[HttpMovieProvider]] = {
    CinemaWorldProvider.name: CinemaWorldProvider,
    FilmWorldProvider.name: FilmWorldProvider,
}


def build_providers(
    names: list[str],
    base_url: str,
    api_token: str,
    retry_policy: Optional[RetryPolicy] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> list[HttpMovieProvider]:
    """설정값으로 제공자 목록 생성 (선언 순서 유지)

    Raises:
        ConfigurationException: base_url/token 누락, 알 수 없는 제공자명
    """
    if not base_url or not api_token:
        raise ConfigurationException(
            "provider_base_url and provider_api_token must be set",
            {"base_url_set": bool(base_url), "api_token_set": bool(api_token)},
        )
    if not names:
        raise ConfigurationException("enabled_providers must not be empty")

    providers = []
    for name in names:
        provider_cls = PROVIDER_CLASSES.get(name.lower())
        if provider_cls is None:
            raise ConfigurationException(
                f"unknown provider '{name}'",
                {"provider": name, "known": sorted(PROVIDER_CLASSES)},
            )
        providers.append(
            provider_cls(base_url, api_token, client=client, retry_policy=retry_policy)
        )
    return providers
