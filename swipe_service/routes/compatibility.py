"""
AI Compatibility Routes

Endpoints:
    POST /api/ai-compatibility/calc   - Score a batch of vacancies (cached per user)
    GET  /api/ai-compatibility        - All cached scores of a user
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobswipe.common.errors import JobSwipeError

from ..auth import verify_token
from ..container import ServiceContainer
from ..dependencies import get_container, to_http_exception
from ..models import CompatibilityRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai-compatibility", tags=["compatibility"], dependencies=[Depends(verify_token)])


@router.post("/calc")
async def calculate_compatibility(
    body: CompatibilityRequest,
    container: ServiceContainer = Depends(get_container),
):
    vacancies = [v.to_vacancy() for v in body.vacancies]
    try:
        results = await container.compatibility.compute_batch(body.user_id, vacancies)
    except JobSwipeError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(f"Compatibility batch failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate compatibility")
    return [r.to_dict() for r in results]


@router.get("")
def cached_compatibility(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    if not user_id:
        raise HTTPException(status_code=400, detail="User ID is required")
    return [r.to_dict() for r in container.compatibility.list_cached(user_id)]
