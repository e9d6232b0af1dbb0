"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from vertex.admin.router import router as admin_router
from vertex.auth.router import router as auth_router
from vertex.auth.service import seed_admin
from vertex.config import get_settings
from vertex.health.router import router as health_router
from vertex.middleware import setup_middleware
from vertex.notifications.router import router as notifications_router
from vertex.predictions.router import router as predictions_router
from vertex.store import build_store
from vertex.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    store = build_store(settings)
    await store.init()
    await seed_admin(store, settings)
    app.state.store = store
    logger.info("app_started", backend=store.name, environment=settings.environment)

    yield

    await store.close()
    app.state.store = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Vertex Tips API",
        description="Backend API for Vertex: betting tips, follows and ROI tracking",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(predictions_router)
    app.include_router(users_router)
    app.include_router(notifications_router)
    app.include_router(admin_router)

    return app


app = create_app()
