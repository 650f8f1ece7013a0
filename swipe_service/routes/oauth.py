"""
hh.ru OAuth Routes

Browser-facing redirects, so these are not behind the API token.

Endpoints:
    GET /auth/hh/start       - Redirect to hh.ru authorization page
    GET /auth/hh/callback    - Exchange code, create user, sync resumes
    GET /api/auth/status     - Whether the user has a usable hh.ru token
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from ..container import ServiceContainer
from ..dependencies import get_container

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])


@router.get("/auth/hh/start")
async def start_oauth(container: ServiceContainer = Depends(get_container)):
    url = container.login.authorize_url()
    logger.info(f"Redirecting to hh.ru OAuth: {url}")
    return RedirectResponse(url, status_code=302)


@router.get("/auth/hh/callback")
async def oauth_callback(
    code: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
):
    if not code:
        logger.error("OAuth callback without authorization code")
        return RedirectResponse("/?hhAuth=error&reason=no_code", status_code=302)

    try:
        user = await container.login.complete_login(code)
    except Exception as e:
        logger.error(f"OAuth callback failed: {e}")
        return RedirectResponse("/?hhAuth=error", status_code=302)

    query = urlencode({"userId": user.id, "hhAuth": "success"})
    return RedirectResponse(f"/?{query}", status_code=302)


@router.get("/api/auth/status")
async def auth_status(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        return await container.login.auth_status(user_id)
    except Exception as e:
        logger.error(f"Auth status failed for user {user_id}: {e}")
        return {"authenticated": False}
