"""
Request-scoped dependencies and error translation for routes.
"""

import logging

from fastapi import HTTPException, Request

from jobswipe.common.errors import JobSwipeError

from .container import ServiceContainer

logger = logging.getLogger(__name__)


def get_container(request: Request) -> ServiceContainer:
    """
    Return the container built at startup.

    Raises:
        HTTPException: 503 if startup could not build it (database down)
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return container


def to_http_exception(error: JobSwipeError) -> HTTPException:
    """Map a typed JobSwipe error onto its HTTP status."""
    if error.status_code >= 500:
        logger.error(f"{error.__class__.__name__}: {error.message}")
    return HTTPException(status_code=error.status_code, detail=error.message)
