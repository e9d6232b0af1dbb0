"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from vertex.config import get_settings
from vertex.dependencies import get_store
from vertex.errors import StoreError
from vertex.store import TipStore

router = APIRouter(prefix="/api")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "OK", "message": "Server is running"}


@router.get("/ready")
async def readiness(store: TipStore = Depends(get_store)) -> dict[str, object]:
    """Readiness probe: checks the storage backend."""
    checks: dict[str, object] = {"backend": store.name}
    try:
        await store.ping()
        checks["store"] = "ok"
    except StoreError:
        checks["store"] = "error"

    return {"status": "ready" if checks["store"] == "ok" else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return API version and environment."""
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
