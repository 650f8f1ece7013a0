"""
Swipe Routes

Endpoints:
    POST /api/swipes         - Record a swipe (idempotent per user/vacancy)
    GET  /api/swipes         - Swipe history, newest first
    POST /api/swipes/reset   - Forget all swipes of a user
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from jobswipe.common.errors import JobSwipeError

from ..auth import verify_token
from ..container import ServiceContainer
from ..dependencies import get_container, to_http_exception
from ..models import SwipeRequest, UserRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/swipes", tags=["swipes"], dependencies=[Depends(verify_token)])


@router.post("")
async def record_swipe(
    body: SwipeRequest,
    container: ServiceContainer = Depends(get_container),
):
    vacancy_id = str(body.vacancy_id) if body.vacancy_id is not None else None
    try:
        outcome = await container.swipes.record_swipe(body.user_id, vacancy_id, body.direction)
    except JobSwipeError as e:
        raise to_http_exception(e)

    status_code = 200 if outcome.already_swiped else 201
    return JSONResponse(status_code=status_code, content=outcome.to_dict())


@router.get("")
def swipe_history(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        swipes = container.swipes.history(user_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return [s.to_dict() for s in swipes]


@router.post("/reset")
def reset_swipes(
    body: UserRequest,
    container: ServiceContainer = Depends(get_container),
):
    try:
        container.swipes.reset(body.user_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return {"message": "Swipes reset successfully"}
