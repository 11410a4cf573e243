from contextlib import asynccontextmanager
from functools import lru_cache
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from projectworks.api.routers import system
from projectworks.api.routers.plans import build_plans_router
from projectworks.config import settings
from projectworks.generation import BedrockPlanGenerator
from projectworks.observability import (
    configure_logging,
    normalize_request_id,
    reset_request_id,
    sanitize_for_logging,
    set_request_id,
)

logger = logging.getLogger("projectworks.api")


@lru_cache(maxsize=1)
def _cached_plan_generator() -> BedrockPlanGenerator:
    return BedrockPlanGenerator(settings=settings)


def get_plan_generator() -> BedrockPlanGenerator:
    return _cached_plan_generator()


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    logger.info("application_startup", extra={"event": "application_startup", "environment": settings.app_env})
    yield
    logger.info("application_shutdown", extra={"event": "application_shutdown"})


async def _api_error_handler(request: Request, exc: StarletteHTTPException):
    # Route errors carry {success, code, message}; return that body as-is.
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return await http_exception_handler(request, exc)


def create_app() -> FastAPI:
    cors_origins = settings.cors_origins_list
    if settings.cors_allow_credentials and any(origin == "*" for origin in cors_origins):
        raise RuntimeError("Invalid CORS_ORIGINS: wildcard '*' is not allowed when credentials are enabled.")

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type", settings.request_id_header],
        expose_headers=["Content-Disposition", settings.request_id_header],
    )
    app.add_exception_handler(StarletteHTTPException, _api_error_handler)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = normalize_request_id(request.headers.get(settings.request_id_header))
        request.state.request_id = request_id
        token = set_request_id(request_id)
        started = time.perf_counter()

        logger.info(
            "request_started",
            extra={
                "event": "request_started",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query": sanitize_for_logging(dict(request.query_params)),
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            response.headers[settings.request_id_header] = request_id
            logger.info(
                "request_completed",
                extra={
                    "event": "request_completed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                },
            )
            return response
        except Exception:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            logger.exception(
                "request_failed",
                extra={
                    "event": "request_failed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": elapsed_ms,
                },
            )
            raise
        finally:
            reset_request_id(token)

    app.include_router(system.router)
    # The generator getter is resolved per request so tests can monkeypatch it on this module.
    app.include_router(build_plans_router(get_plan_generator=lambda: get_plan_generator()))
    return app


app = create_app()
