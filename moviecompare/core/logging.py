"""로깅 설정

- 로거 이름: movie_compare (모든 모듈이 같은 logger 사용)
- production 환경에서는 DEBUG 비활성화 + 짧은 포맷
- 제공자 API 토큰은 어떤 로그에도 남기지 않음 (TokenRedactionFilter)
"""
import logging
import os
import sys
from typing import Optional

from moviecompare.core.config import settings

LOGGER_NAME = "movie_compare"
REDACTED = "***"

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"


class TokenRedactionFilter(logging.Filter):
    """로그 메시지에서 비밀 값을 마스킹

    예외 메시지에 요청 헤더가 섞여 나오는 경우까지 포함해,
    포맷이 끝난 메시지 기준으로 치환합니다.
    """

    def __init__(self, secrets: Optional[list[str]] = None):
        super().__init__()
        self.secrets = [s for s in (secrets or []) if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def resolve_log_level(level: str, production: bool = IS_PRODUCTION) -> int:
    """설정 문자열 → logging 레벨 (production에서는 최소 INFO)"""
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        value = logging.INFO
    if production and value < logging.INFO:
        value = logging.INFO
    return value


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정"""
    logger = logging.getLogger(LOGGER_NAME)
    log_level = resolve_log_level(settings.log_level)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if IS_PRODUCTION:
        fmt = "%(asctime)s - %(levelname)s - %(message)s"
    else:
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(TokenRedactionFilter([settings.provider_api_token]))
    logger.addHandler(handler)

    return logger


logger = setup_logging()
