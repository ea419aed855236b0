"""Pydantic 스키마 정의 - 정규 레코드 + API 요청/응답"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


class CatalogEntry(BaseModel):
    """제공자 목록의 영화 1건 (불변)

    id는 제공자 접두사를 제거한 값으로, 같은 제공자의 get_detail에 그대로 넘길 수 있습니다.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="제공자 로컬 ID (접두사 제거)")
    title: str = Field(..., description="제목 (제공자 간 동일성 키)")
    year: str = Field("", description="개봉 연도")
    poster: str = Field("", description="포스터 URL")
    provider: str = Field(..., description="제공자명")


class DetailRecord(BaseModel):
    """(제공자, 영화) 단위 상세 정보"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="제공자 로컬 ID (접두사 제거)")
    title: str = Field("", description="제목")
    year: str = Field("", description="개봉 연도")
    poster: str = Field("", description="포스터 URL")
    type: Optional[str] = Field(None, description="유형 (movie 등)")
    price: str = Field("", description="제공자 원본 가격 문자열 (파싱 불가할 수 있음)")
    provider: str = Field(..., description="제공자명")


class ProviderRef(BaseModel):
    """셀렉터: 한 제목에 대한 (제공자명, 로컬 ID) 쌍"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=50, description="제공자명")
    id: str = Field(..., min_length=1, max_length=50, description="제공자 로컬 ID")

    @field_validator("name", "id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("공백만으로 구성될 수 없습니다")
        return v.strip()


class AggregatedMovie(BaseModel):
    """제공자 통합 영화 정보

    providers는 제공자 선언 순서를 따르며 비어있지 않습니다.
    """
    title: str = Field(..., description="제목")
    year: str = Field("", description="개봉 연도")
    poster: str = Field("", description="포스터 URL")
    providers: List[ProviderRef] = Field(..., min_length=1, description="이 제목을 가진 제공자 목록")


class BestPrice(BaseModel):
    """최저가 결과"""
    provider: str = Field(..., description="최저가 제공자")
    price: str = Field(..., description="제공자 원본 가격 문자열")


class BestPriceRequest(BaseModel):
    """최저가 조회 요청"""
    providers: List[ProviderRef] = Field(..., min_length=1, max_length=20, description="조회할 셀렉터 목록")


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    cache: str
    providers: List[str]
