"""Upstream movie providers.

공개 API는 이 파일에서만 export합니다.
"""

from .base import MovieProvider
from .retry import RetryPolicy
from .movie_provider import (
    CinemaWorldProvider,
    FilmWorldProvider,
    HttpMovieProvider,
    PROVIDER_CLASSES,
    build_providers,
)

__all__ = [
        "MovieProvider",
        "RetryPolicy",
        "HttpMovieProvider",
        "CinemaWorldProvider",
        "FilmWorldProvider",
        "PROVIDER_CLASSES",
        "build_providers",
]
