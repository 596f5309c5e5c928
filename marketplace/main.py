"""
FastAPI application entry point.
Mounts routes, CORS and Prometheus middleware, and maps domain errors to JSON responses.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.exc import SQLAlchemyError

from marketplace.api.v1.router import api_router
from marketplace.cache.redis_client import close_redis
from marketplace.config import get_settings
from marketplace.core.errors import AuthenticationError, DependencyError, MarketplaceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: make sure the upload root exists. Shutdown: release the Redis pool."""
    Path(get_settings().upload_dir).mkdir(parents=True, exist_ok=True)
    yield
    await close_redis()


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI adds to error locations
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def handle_marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report every invalid field at once, as 400 rather than FastAPI's default 422."""
    errors = [{"field": _field_name(tuple(err["loc"])), "message": err["msg"]} for err in exc.errors()]
    return JSONResponse(status_code=400, content=jsonable_encoder({"message": "Validation failed", "errors": errors}))


async def handle_dependency_error(request: Request, exc: Exception) -> JSONResponse:
    """Storage failures are logged in full but never leaked to the caller."""
    logger.error("Dependency failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = FastAPI(
        title=settings.app_name,
        description="Local marketplace backend: listings with geolocation, proximity search and photo uploads.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(DependencyError, handle_dependency_error)
    app.add_exception_handler(SQLAlchemyError, handle_dependency_error)
    app.add_exception_handler(MarketplaceError, handle_marketplace_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    # Prometheus metrics at /metrics
    app.mount("/metrics", make_asgi_app())

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
