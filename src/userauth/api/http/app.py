"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from src.userauth.api.http.app_data import ApplicationDependencies, build_dependencies
from src.userauth.api.http.responses import (
    ApiError,
    error_response,
    service_error_response,
)
from src.userauth.api.http.routers.health import router_health
from src.userauth.api.http.routers.users import router_users
from src.userauth.api.utils.app_startup import configure_logging
from src.userauth.runtime.context import get_config


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        response.headers.setdefault("Cache-Control", "no-store")
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- Lifecycle hooks ---
def startup(app: FastAPI) -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # tests and embedding callers may inject their own dependencies
    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = build_dependencies()

    if not (config.jwt.access_token_secret and config.jwt.refresh_token_secret):
        logger.warning("Token secrets are not configured; login and refresh will fail")


def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is not None and deps.database_service is not None:
        deps.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup(app)
    try:
        yield
    finally:
        shutdown(app)


# --- Exception handlers ---
async def api_error_handler(request: Request, exc: ApiError):
    return service_error_response(exc.error)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return error_response(400, "Invalid request", errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


# --- Request logging middleware ---
def _loggable_path(path: str) -> str:
    """Request path with a verification token segment masked."""
    head, sep, _ = path.partition("/email-verification/")
    if sep and not path.endswith("/email-verification/send"):
        return f"{head}{sep}***"
    return path


async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    # query strings are omitted
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": _loggable_path(request.url.path),
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            response = error_response(500, "Something went wrong")
            response.headers["X-Request-ID"] = request_id
            return response


def create_app() -> FastAPI:
    """Build the application from the current configuration."""
    config = get_config()
    is_production = config.app.environment == "production"

    app = FastAPI(
        title="userauth",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.app_dependencies = None

    app.add_middleware(SecurityHeadersMiddleware)

    # --- CORS configuration ---
    if is_production and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # --- Router registration ---
    app.include_router(router_health)
    app.include_router(router_users, prefix=config.app.api_prefix)

    return app


configure_logging()

app = create_app()

# expose startup for tests
__all__ = ["app", "create_app", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
