"""Liveness and readiness endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from loguru import logger
from starlette.responses import JSONResponse

from src.userauth.api.http.deps import get_user_store
from src.userauth.core.exceptions import StoreError
from src.userauth.core.storage.user_store import UserStore
from src.userauth.runtime.context import get_config

router_health = APIRouter(tags=["health"])


@router_health.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is serving requests."""
    return {"status": "healthy", "service": "userauth"}


@router_health.get("/ready", response_model=None)
def readiness(
    store: UserStore = Depends(get_user_store),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 503 when the user store is unreachable."""
    try:
        store_ready = store.is_available()
    except StoreError as e:
        logger.error("User store readiness check failed: {}", e)
        store_ready = False

    body = {
        "status": "ready" if store_ready else "not_ready",
        "checks": {
            "user_store": {
                "status": "healthy" if store_ready else "unhealthy",
                "backend": get_config().database.backend,
            }
        },
    }
    if not store_ready:
        return JSONResponse(status_code=503, content=body)
    return body
