"""
Resume Sync Service

Pulls the user's resumes from hh.ru, renders each into the plain text used
for cover letters and scoring, and stores them. Also owns resume selection,
the manually entered resume and the profile summary.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from jobswipe.common.errors import NotAuthenticatedError, NotFoundError, ValidationError
from jobswipe.common.models import Resume
from jobswipe.common.repositories import ResumeRepositoryInterface, UserRepositoryInterface
from jobswipe.services.hh_auth import TokenManager
from jobswipe.services.hh_client import HHClient

logger = logging.getLogger(__name__)

DEFAULT_PROFESSION = "Специалист"
EXPERIENCE_DESCRIPTION_CHARS = 200


def resume_to_text(resume: Dict[str, Any]) -> str:
    """
    Render an hh.ru resume detail as plain text.

    Example output:
        Анна Петрова
        Позиция: Маркетолог
        Локация: Москва
        Опыт работы: 5 лет 3 месяцев
        ...
    """
    parts: List[str] = []

    parts.append(f"{resume.get('first_name') or ''} {resume.get('last_name') or ''}".strip())
    parts.append(f"Позиция: {resume.get('title') or ''}")

    area = resume.get("area")
    if area:
        parts.append(f"Локация: {area.get('name')}")

    salary = resume.get("salary")
    if salary:
        parts.append(f"Желаемая зарплата: {salary.get('amount')} {salary.get('currency')}")

    total = resume.get("total_experience")
    if total:
        months = int(total.get("months") or 0)
        parts.append(f"Опыт работы: {months // 12} лет {months % 12} месяцев")

    if resume.get("skills"):
        parts.append(f"\nНавыки:\n{resume['skills']}")

    skill_set = resume.get("skill_set") or []
    if skill_set:
        parts.append(f"Ключевые навыки: {', '.join(skill_set)}")

    experience = resume.get("experience") or []
    if experience:
        parts.append("\nОпыт работы:")
        for exp in experience:
            end = exp.get("end") or "по настоящее время"
            parts.append(f"- {exp.get('company')}: {exp.get('position')} ({exp.get('start')} - {end})")
            description = exp.get("description")
            if description:
                parts.append(f"  {description[:EXPERIENCE_DESCRIPTION_CHARS]}...")

    education = (resume.get("education") or {}).get("primary") or []
    if education:
        parts.append("\nОбразование:")
        for edu in education:
            detail = edu.get("result") or edu.get("organization")
            parts.append(f"- {edu.get('name')} ({edu.get('year')}): {detail}")

    languages = resume.get("language") or []
    if languages:
        rendered = ", ".join(
            f"{lang.get('name')} ({(lang.get('level') or {}).get('name')})" for lang in languages
        )
        parts.append(f"\nЯзыки: {rendered}")

    return "\n".join(parts)


def extract_profession(title: Optional[str], content_json: Optional[Dict[str, Any]]) -> str:
    """Resume title, else the latest position, else the first specialization."""
    if title:
        return title

    content_json = content_json or {}
    experience = content_json.get("experience")
    if isinstance(experience, list) and experience and experience[0].get("position"):
        return experience[0]["position"]

    specialization = content_json.get("specialization")
    if isinstance(specialization, list) and specialization:
        first = specialization[0]
        if isinstance(first, dict):
            return first.get("name") or DEFAULT_PROFESSION
        return str(first)

    return DEFAULT_PROFESSION


class ResumeSyncService:

    def __init__(
        self,
        resumes: ResumeRepositoryInterface,
        users: UserRepositoryInterface,
        hh_client: HHClient,
        token_manager: TokenManager,
    ):
        self.resumes = resumes
        self.users = users
        self.hh_client = hh_client
        self.token_manager = token_manager

    async def sync(self, user_id: str, access_token: str) -> List[Resume]:
        """
        Fetch every hh.ru resume of the user and upsert it locally.

        A newly created resume is selected only while the user has no
        selected resume, so an existing choice is never overridden.

        Raises:
            HHApiError: If listing or fetching a resume fails
        """
        short_list = await self.hh_client.list_resumes(access_token)
        logger.info(f"Syncing {len(short_list)} resumes for user {user_id}")

        has_selected = await asyncio.to_thread(self.resumes.get_selected, user_id) is not None
        synced: List[Resume] = []

        for short in short_list:
            detail = await self.hh_client.get_resume_detail(access_token, short["id"])
            resume = await asyncio.to_thread(
                self.resumes.upsert_hh_resume,
                user_id=user_id,
                hh_resume_id=short["id"],
                title=detail.get("title"),
                content=resume_to_text(detail),
                content_json=detail,
                select_if_new=not has_selected,
            )
            has_selected = has_selected or resume.selected
            synced.append(resume)

        logger.info(f"Synced {len(synced)} resumes for user {user_id}")
        return synced

    async def sync_for_user(self, user_id: str) -> List[Resume]:
        """
        Sync using the user's stored token.

        Raises:
            NotAuthenticatedError: If no valid hh.ru token is available
        """
        if not user_id:
            raise ValidationError("User ID required")
        access_token = await self.token_manager.get_valid_access_token(user_id)
        if not access_token:
            raise NotAuthenticatedError("Not authenticated with HH.ru")
        return await self.sync(user_id, access_token)

    def list_resumes(self, user_id: str) -> List[Resume]:
        if not user_id:
            raise ValidationError("User ID required")
        return self.resumes.list_for_user(user_id)

    def select_resume(self, user_id: str, resume_id: str) -> Resume:
        """
        Make resume_id the user's only selected resume.

        Raises:
            NotFoundError: If the resume does not belong to the user
        """
        if not user_id or not resume_id:
            raise ValidationError("User ID and Resume ID required")
        selected = self.resumes.select(user_id, str(resume_id))
        if selected is None:
            raise NotFoundError("Resume not found")
        logger.info(f"User {user_id} selected resume {selected.id}")
        return selected

    def get_manual_resume(self, user_id: str) -> str:
        if not user_id:
            raise ValidationError("User ID is required")
        resume = self.resumes.get_manual(user_id)
        return resume.content if resume else ""

    def save_manual_resume(self, user_id: str, content: Any) -> Resume:
        if not isinstance(content, str):
            raise ValidationError("Content must be a string")
        if not user_id:
            raise ValidationError("User ID is required")
        return self.resumes.save_manual(user_id, content)

    def get_profession(self, user_id: Optional[str]) -> Dict[str, Optional[str]]:
        """Profession label from the selected resume, any resume as fallback."""
        if not user_id:
            return {"profession": None}

        resume = self.resumes.get_selected(user_id)
        if resume is None:
            all_resumes = self.resumes.list_for_user(user_id)
            resume = all_resumes[0] if all_resumes else None
        if resume is None:
            return {"profession": None}

        return {
            "profession": extract_profession(resume.title, resume.content_json),
            "resumeTitle": resume.title,
        }

    def get_profile(self, user_id: Optional[str]) -> Dict[str, Any]:
        """hh.ru connection state, hh.ru resumes and the manual resume text."""
        empty = {"hhConnected": False, "user": None, "hhResumes": [], "manualResume": ""}
        if not user_id:
            return empty
        user = self.users.get(user_id)
        if user is None:
            return empty

        user_resumes = self.resumes.list_for_user(user_id)
        manual = next((r for r in user_resumes if r.is_manual), None)
        return {
            "hhConnected": bool(user.hh_access_token and user.hh_user_id),
            "user": user.to_public_dict(),
            "hhResumes": [
                {
                    "id": r.id,
                    "hhResumeId": r.hh_resume_id,
                    "title": r.title,
                    "selected": r.selected,
                    "updatedAt": r.updated_at.isoformat() if r.updated_at else None,
                }
                for r in user_resumes
                if not r.is_manual
            ],
            "manualResume": manual.content if manual else "",
        }
