"""
Resume and Profile Routes

Endpoints:
    POST /api/hh/resumes/sync     - Pull resumes from hh.ru
    GET  /api/hh/resumes          - Stored resumes of a user
    POST /api/hh/resumes/select   - Make one resume the selected one
    GET  /api/resume              - Manual resume text
    POST /api/resume              - Save manual resume text
    GET  /api/profile             - hh.ru connection state and resumes
    GET  /api/user/profession     - Profession label from the selected resume
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from jobswipe.common.errors import HHApiError, JobSwipeError

from ..auth import verify_token
from ..container import ServiceContainer
from ..dependencies import get_container, to_http_exception
from ..models import ManualResumeRequest, SelectResumeRequest, UserRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["resumes"], dependencies=[Depends(verify_token)])


@router.post("/hh/resumes/sync")
async def sync_resumes(
    body: UserRequest,
    container: ServiceContainer = Depends(get_container),
):
    try:
        resumes = await container.resumes.sync_for_user(body.user_id)
    except HHApiError as e:
        logger.error(f"Resume sync failed for user {body.user_id}: {e.message}")
        raise HTTPException(status_code=500, detail="Failed to sync resumes")
    except JobSwipeError as e:
        raise to_http_exception(e)
    return {"resumes": [r.to_dict() for r in resumes], "count": len(resumes)}


@router.get("/hh/resumes")
def list_resumes(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        resumes = container.resumes.list_resumes(user_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return [r.to_dict() for r in resumes]


@router.post("/hh/resumes/select")
def select_resume(
    body: SelectResumeRequest,
    container: ServiceContainer = Depends(get_container),
):
    resume_id = str(body.resume_id) if body.resume_id is not None else None
    try:
        resume = container.resumes.select_resume(body.user_id, resume_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return resume.to_dict()


@router.get("/resume")
def get_manual_resume(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        content = container.resumes.get_manual_resume(user_id)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return {"content": content}


@router.post("/resume")
def save_manual_resume(
    body: ManualResumeRequest,
    container: ServiceContainer = Depends(get_container),
):
    try:
        resume = container.resumes.save_manual_resume(body.user_id, body.content)
    except JobSwipeError as e:
        raise to_http_exception(e)
    return JSONResponse(status_code=201, content=resume.to_dict())


@router.get("/profile")
def get_profile(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    return container.resumes.get_profile(user_id)


@router.get("/user/profession")
def get_profession(
    user_id: Optional[str] = Query(None, alias="userId"),
    container: ServiceContainer = Depends(get_container),
):
    return container.resumes.get_profession(user_id)
