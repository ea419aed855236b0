"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


class MovieCompareException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 제공자(외부 API) 관련 예외
class ProviderException(MovieCompareException):
    """제공자 호출 실패

    전송 오류, 재시도 소진, 응답 디코딩 실패를 하나로 묶습니다.
    호출자는 하위 종류를 구분하지 않고 "이 제공자는 이번 호출에서 실패"로만 취급합니다.
    """
    def __init__(self, provider_name: str, cause: Optional[BaseException] = None, details: Optional[dict[str, Any]] = None):
        self.provider_name = provider_name
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown"
        message = f"Provider '{provider_name}' unavailable ({reason})"
        super().__init__(message, "PROVIDER_ERROR", details or {"provider": provider_name, "reason": reason})


class RetryExhaustedException(MovieCompareException):
    """재시도 정책의 모든 시도가 실패"""
    def __init__(self, operation: str, attempts: int, last_error: Optional[BaseException] = None):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        message = f"Operation '{operation}' failed after {attempts} attempt(s): {last_error!r}"
        super().__init__(message, "RETRY_EXHAUSTED",
                        {"operation": operation, "attempts": attempts})


# 집계 관련 예외
class AggregationExhaustedException(MovieCompareException):
    """어떤 제공자에서도 사용 가능한 데이터를 얻지 못함"""
    def __init__(self, message: str = "Unable to retrieve price from any provider", details: Optional[dict[str, Any]] = None):
        super().__init__(message, "AGGREGATION_EXHAUSTED", details)


# 설정 관련 예외
class ConfigurationException(MovieCompareException):
    """설정 누락/오류 (기동 시점)"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Invalid configuration: {reason}"
        super().__init__(message, "CONFIGURATION_ERROR", details or {"reason": reason})


# 캐시 관련 예외
class CacheException(MovieCompareException):
    """캐시 관련 예외"""
    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """캐시 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to connect to cache: {reason}"
        super().__init__(message, "CACHE_CONNECTION_ERROR", details)


class CacheSerializationException(CacheException):
    """캐시 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                        details or {"operation": operation, "reason": reason})


# 유효성 검증 관련 예외
class ValidationException(MovieCompareException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                        details or {"field": field, "reason": reason})
