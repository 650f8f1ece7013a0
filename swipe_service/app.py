"""
FastAPI service for JobSwipe.

Serves the swipe UI's JSON API: hh.ru vacancy batches, swipes, compatibility
scores, resumes, OAuth and the async application pipeline. Components are
built once at startup into a ServiceContainer kept on app.state.

Run:
    uvicorn swipe_service.app:app --host 0.0.0.0 --port 8000
"""

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobswipe.common.errors import DatabaseUnavailableError
from jobswipe.common.logger import setup_logging
from jobswipe.common.models import utc_now

from . import __version__
from .config import validate_config_on_startup
from .container import build_container
from .models import HealthResponse
from .routes import (
    applications_router,
    compatibility_router,
    jobs_router,
    oauth_router,
    resumes_router,
    swipes_router,
    vacancies_router,
)

logger = logging.getLogger(__name__)

# Validate configuration at import so a bad environment fails fast
settings = validate_config_on_startup()

app = FastAPI(title="JobSwipe", version=__version__)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(applications_router)
app.include_router(compatibility_router)
app.include_router(vacancies_router)
app.include_router(jobs_router)
app.include_router(swipes_router)
app.include_router(resumes_router)
app.include_router(oauth_router)


@app.on_event("startup")
async def startup_container():
    """Connect storage and build services unless a container was injected."""
    setup_logging(format=settings.log_format)

    if getattr(app.state, "container", None) is not None:
        logger.info("Using pre-built service container")
        return

    try:
        app.state.container = build_container(settings)
        logger.info("Service container ready")
    except DatabaseUnavailableError as e:
        logger.error(f"Starting without storage: {e.message}")
        app.state.container = None


@app.on_event("shutdown")
async def shutdown_container():
    container = getattr(app.state, "container", None)
    if container is None:
        return
    if container.queue.pending:
        logger.info(f"Waiting for {container.queue.pending} application tasks")
        await container.queue.join()
    await container.pipeline.drain()
    await container.swipes.drain()
    await container.close()
    logger.info("Service container closed")


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness plus storage readiness for container orchestration."""
    container = getattr(app.state, "container", None)
    ready = container is not None and await asyncio.to_thread(container.is_ready)
    return HealthResponse(
        status="healthy" if ready else "degraded",
        database="connected" if ready else "unavailable",
        queued_applications=container.queue.pending if container is not None else 0,
        timestamp=utc_now(),
    )
