"""
Application Routes

Async apply and the polling endpoints the client uses to follow it.

Endpoints:
    POST  /api/apply/async                      - Record and queue an application
    POST  /api/hh/apply                         - Apply within the request (legacy)
    GET   /api/applications                     - Applications of a user
    GET   /api/hh/applications                  - Same list, legacy path
    POST  /api/applications                     - Store a client-built application
    GET   /api/applications/pending-count       - In-flight count for the badge
    GET   /api/applications/{id}                - One application (polling)
    PATCH /api/applications/{id}/cover-letter   - Edit the stored letter
    POST  /api/cover-letter/generate            - Preview a cover letter
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from jobswipe.common.errors import JobSwipeError
from jobswipe.common.models import ApplicationStatus

from ..auth import verify_token
from ..container import ServiceContainer
from ..dependencies import get_container, to_http_exception
from ..models import (
    ApplicationCreateRequest,
    ApplyAsyncRequest,
    CoverLetterGenerateRequest,
    CoverLetterUpdateRequest,
    DirectApplyRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["applications"], dependencies=[Depends(verify_token)])


@router.post("/apply/async")
async def apply_async(
    body: ApplyAsyncRequest,
    container: ServiceContainer = Depends(get_container),
):
    """Return immediately with status "queued"; processing continues in the background."""
    vacancy = body.vacancy_data.model_dump(by_alias=True) if body.vacancy_data else {}
    try:
        ack = await container.pipeline.submit_application(
            user_id=body.user_id,
            vacancy_id=str(body.vacancy_id) if body.vacancy_id is not None else "",
            vacancy=vacancy,
            resume_text=body.resume_text,
            is_demo=body.is_demo,
        )
    except JobSwipeError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(f"Failed to queue application: {e}")
        raise HTTPException(status_code=500, detail="Failed to queue application")
    return ack.to_dict()


@router.post("/hh/apply")
async def apply_direct(
    body: DirectApplyRequest,
    container: ServiceContainer = Depends(get_container),
):
    """Synchronous apply kept for older clients; a rejected application answers 400."""
    vacancy_id = str(body.vacancy_id) if body.vacancy_id is not None else None
    try:
        application = await container.pipeline.apply_now(body.user_id, vacancy_id, body.cover_letter)
    except JobSwipeError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(f"Direct apply failed: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to apply"})

    if application.status == ApplicationStatus.FAILED:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": application.error_reason,
                "application": application.to_dict(),
            },
        )
    return {"success": True, "application": application.to_dict()}


@router.get("/applications")
@router.get("/hh/applications")
def list_applications(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        applications = container.pipeline.list_applications(user_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return [a.to_dict() for a in applications]


@router.post("/applications")
def create_application(
    body: Any = Body(None),
    container: ServiceContainer = Depends(get_container),
):
    try:
        request = ApplicationCreateRequest.model_validate(body)
    except PydanticValidationError as e:
        logger.info(f"Rejected application record: {e.error_count()} validation errors")
        raise HTTPException(status_code=400, detail="Invalid application data")

    application = container.pipeline.record_application(request.to_application())
    return JSONResponse(status_code=201, content=application.to_dict())


@router.get("/applications/pending-count")
def pending_count(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    """Never fails: the badge shows 0 when the count is unavailable."""
    try:
        count = container.pipeline.get_pending_count(user_id)
    except Exception as e:
        logger.error(f"Error fetching pending count: {e}")
        count = 0
    return {"count": count}


@router.get("/applications/{application_id}")
def get_application(
    application_id: str,
    container: ServiceContainer = Depends(get_container),
):
    try:
        application = container.pipeline.get_application(application_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return application.to_dict()


@router.patch("/applications/{application_id}/cover-letter")
def update_cover_letter(
    application_id: str,
    body: CoverLetterUpdateRequest,
    container: ServiceContainer = Depends(get_container),
):
    if not isinstance(body.cover_letter, str):
        raise HTTPException(status_code=400, detail="Cover letter must be a string")
    try:
        application = container.pipeline.update_cover_letter(application_id, body.cover_letter)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return application.to_dict()


@router.post("/cover-letter/generate")
async def generate_cover_letter(
    body: CoverLetterGenerateRequest,
    container: ServiceContainer = Depends(get_container),
):
    vacancy = body.vacancy.to_vacancy()
    logger.debug(f"Cover letter preview: resume length {len(body.resume)}, vacancy {vacancy.id}")
    cover_letter = await container.cover_letters.generate(body.resume, vacancy)
    return {"coverLetter": cover_letter}
