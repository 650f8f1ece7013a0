"""
Local Job Catalog Routes

Endpoints:
    GET  /api/jobs                  - Every catalog job, newest first
    GET  /api/jobs/unswiped         - Catalog jobs for the swipe deck, filtered
    GET  /api/jobs/filter-options   - Companies and locations present in the catalog
    GET  /api/jobs/search           - Substring search by company, title, keyword
    POST /api/jobs                  - Add a job to the catalog
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from jobswipe.common.errors import JobSwipeError

from ..auth import verify_token
from ..container import ServiceContainer
from ..dependencies import get_container, to_http_exception
from ..models import JobCreateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"], dependencies=[Depends(verify_token)])


@router.get("")
def list_jobs(container: ServiceContainer = Depends(get_container)):
    return [job.to_dict() for job in container.catalog.list_jobs()]


@router.get("/unswiped")
def unswiped_jobs(
    company: Optional[str] = Query(None),
    salary_range: Optional[str] = Query(None, alias="salaryRange"),
    employment_type: Optional[str] = Query(None, alias="employmentType"),
    location: Optional[str] = Query(None),
    keyword: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
):
    try:
        jobs = container.catalog.browse(
            company=company,
            salary_range=salary_range,
            employment_type=employment_type,
            location=location,
            keyword=keyword,
        )
    except JobSwipeError as e:
        raise to_http_exception(e)
    return [job.to_dict() for job in jobs]


@router.get("/filter-options")
def filter_options(container: ServiceContainer = Depends(get_container)):
    return container.catalog.filter_options()


@router.get("/search")
def search_jobs(
    company: Optional[str] = Query(None),
    title: Optional[str] = Query(None),
    keyword: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
):
    jobs = container.catalog.search(company=company, title=title, keyword=keyword)
    return [job.to_dict() for job in jobs]


@router.post("")
def create_job(
    body: Any = Body(None),
    container: ServiceContainer = Depends(get_container),
):
    try:
        request = JobCreateRequest.model_validate(body)
    except PydanticValidationError as e:
        logger.info(f"Rejected catalog job: {e.error_count()} validation errors")
        raise HTTPException(status_code=400, detail="Invalid job data")

    job = container.catalog.create(request.to_job())
    return JSONResponse(status_code=201, content=job.to_dict())
