"""FastAPI 앱 팩토리"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from moviecompare.core.config import settings
from moviecompare.core.exceptions import ConfigurationException
from moviecompare.core.logging import logger
from moviecompare.api import health_router, movie_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기"""
    logger.info("Starting application...")
    yield
    logger.info("Shutting down application...")
    from moviecompare.api.routes.movie_routes import shutdown_services
    from moviecompare.providers.http_client import shutdown_shared_http_client

    await shutdown_services()
    await shutdown_shared_http_client()


def create_app() -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(movie_router)

    @app.exception_handler(ConfigurationException)
    async def configuration_error_handler(request: Request, exc: ConfigurationException):
        logger.error(f"Service misconfigured: {exc}")
        return JSONResponse(
            status_code=503,
            content={"detail": exc.message, "error_code": exc.error_code},
        )

    return app

# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()
