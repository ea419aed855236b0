"""설정 관리 - 환경 변수 로드 및 검증"""
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 외부 영화 제공자 API
    provider_base_url: str = ""
    provider_api_token: str = ""
    enabled_providers: list[str] = ["cinemaworld", "filmworld"]

    # 제공자 호출 정책: 시도당 타임아웃 + 제한된 재시도
    provider_timeout_s: float = 10.0
    provider_max_attempts: int = 3
    provider_retry_backoff_s: float = 0.0

    # 캐시
    # - memory: 프로세스 내 TTL 캐시 (기본)
    # - redis: 여러 인스턴스가 공유하는 TTL 캐시 (키 포맷 동일)
    cache_backend: str = "memory"
    redis_url: str = ""
    cache_ttl: int = 300  # 5분

    # API
    api_title: str = "영화 최저가 비교 서비스"
    api_version: str = "1.0.0"
    api_description: str = "여러 제공자의 영화 목록을 합치고 최저가를 찾습니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator("cache_ttl")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache_ttl must be positive")
        return v

    @field_validator("provider_timeout_s")
    @classmethod
    def validate_provider_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("provider_timeout_s must be positive")
        return v

    @field_validator("provider_max_attempts")
    @classmethod
    def validate_provider_max_attempts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("provider_max_attempts must be positive")
        return v

    @field_validator("provider_retry_backoff_s")
    @classmethod
    def validate_provider_backoff(cls, v: float) -> float:
        if v < 0:
            raise ValueError("provider_retry_backoff_s must be >= 0")
        return v

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "redis"):
            raise ValueError("cache_backend must be 'memory' or 'redis'")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
