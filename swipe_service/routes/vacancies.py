"""
hh.ru Vacancy Routes

Endpoints:
    GET /api/hh/jobs    - One swipe batch, already-swiped vacancies removed
    GET /api/hh/areas   - Flattened hh.ru area list (cached)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from jobswipe.common.errors import HHApiError
from jobswipe.common.models import VacancyFilters

from ..auth import verify_token
from ..container import ServiceContainer
from ..dependencies import get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hh", tags=["vacancies"], dependencies=[Depends(verify_token)])


@router.get("/jobs")
async def search_jobs(
    text: Optional[str] = Query(None),
    area: List[str] = Query(default=[]),
    employment: Optional[str] = Query(None),
    schedule: Optional[str] = Query(None),
    experience: Optional[str] = Query(None),
    batch: str = Query("1"),
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        batch_number = max(1, int(batch))
    except ValueError:
        batch_number = 1

    filters = VacancyFilters(
        text=text,
        areas=[a for a in area if a.strip()],
        employment=employment,
        schedule=schedule,
        experience=experience,
    )
    try:
        page = await container.search.search(filters, batch_number, user_id=user_id)
    except HHApiError as e:
        logger.error(f"hh.ru search failed: {e.message}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to fetch jobs from HH.ru",
                "jobs": [],
                "hasMore": False,
                "total": 0,
                "batch": 1,
            },
        )
    return page.to_dict()


@router.get("/areas")
async def list_areas(container: ServiceContainer = Depends(get_container)):
    try:
        areas = await container.search.areas()
    except HHApiError as e:
        logger.error(f"hh.ru areas failed: {e.message}")
        raise HTTPException(status_code=500, detail="Failed to load areas")
    return [a.to_dict() for a in areas]
