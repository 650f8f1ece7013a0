"""
Application Pipeline

Two-phase workflow behind "apply to vacancy":

1. Synchronous phase (submit_application): validate, insert a PENDING
   Application, schedule compatibility invalidation, enqueue the background
   phase and return an acknowledgement immediately.
2. Background phase (process_application): load the resume text, generate a
   cover letter, obtain an hh.ru token, submit the negotiation and record the
   terminal status. Runs at most once per application, no retries.

Clients poll get_application / list_applications / get_pending_count.

apply_now is the older synchronous variant: it submits within the request
using the letter the client sends and records only the outcome.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from jobswipe.common.errors import (
    HHApiError,
    NoResumeSelectedError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)
from jobswipe.common.logger import get_logger
from jobswipe.common.models import (
    Application,
    ApplicationStatus,
    SubmissionAck,
    Vacancy,
)
from jobswipe.common.repositories import (
    ApplicationRepositoryInterface,
    CompatibilityRepositoryInterface,
    ResumeRepositoryInterface,
)
from jobswipe.services.application_queue import ApplicationQueue
from jobswipe.services.cover_letter_service import CoverLetterGenerator
from jobswipe.services.hh_auth import TokenManager
from jobswipe.services.hh_client import HHClient

logger = logging.getLogger(__name__)

DEFAULT_JOB_TITLE = "Вакансия"
DEFAULT_COMPANY = "Компания"

COVER_LETTER_ERROR = "Ошибка генерации сопроводительного письма."
REASON_NOT_AUTHENTICATED = "Не авторизован на hh.ru"
REASON_NO_RESUME = "Не выбрано резюме"
REASON_TEST_REQUIRED = "Вакансия требует тестового задания. Отклик возможен только на hh.ru."
REASON_INTERNAL = "Внутренняя ошибка обработки"


def vacancy_from_payload(vacancy_id: str, payload: Optional[Dict[str, Any]]) -> Vacancy:
    """Build the prompt vacancy from client-supplied vacancy data."""
    payload = payload or {}
    return Vacancy(
        id=str(vacancy_id),
        title=payload.get("title") or "",
        company=payload.get("company") or "",
        salary=payload.get("salary") or "",
        description=payload.get("description") or "",
        description_full=payload.get("descriptionFull") or payload.get("description_full") or "",
        tags=list(payload.get("tags") or []),
    )


class ApplicationPipeline:
    """
    Orchestrates application submission.

    All collaborators are injected so tests can swap in fakes. Repository
    calls made from coroutines run in a worker thread; the synchronous polling
    methods are served from FastAPI's threadpool.
    """

    def __init__(
        self,
        applications: ApplicationRepositoryInterface,
        resumes: ResumeRepositoryInterface,
        compatibility: CompatibilityRepositoryInterface,
        cover_letters: CoverLetterGenerator,
        token_manager: TokenManager,
        hh_client: HHClient,
        queue: ApplicationQueue,
    ):
        self.applications = applications
        self.resumes = resumes
        self.compatibility = compatibility
        self.cover_letters = cover_letters
        self.token_manager = token_manager
        self.hh_client = hh_client
        self.queue = queue
        self._side_tasks: Set[asyncio.Task] = set()

    # ===== Synchronous phase =====

    async def submit_application(
        self,
        user_id: Optional[str],
        vacancy_id: str,
        vacancy: Optional[Dict[str, Any]] = None,
        resume_text: Optional[str] = None,
        is_demo: bool = False,
    ) -> SubmissionAck:
        """
        Record intent to apply and queue the background phase.

        Args:
            user_id: Applicant, None for anonymous demo use
            vacancy_id: hh.ru vacancy id
            vacancy: Client-supplied vacancy data (title, company, salary, description, tags)
            resume_text: Resume text, only used when there is no user
            is_demo: Generate the letter but never submit to hh.ru

        Returns:
            SubmissionAck with status "queued"

        Raises:
            ValidationError: If vacancy_id is missing
        """
        if not vacancy_id:
            raise ValidationError("Vacancy ID required")
        vacancy_id = str(vacancy_id)
        payload = vacancy or {}

        application = await asyncio.to_thread(self.applications.create, Application(
            user_id=user_id or None,
            vacancy_id=vacancy_id,
            job_title=payload.get("title") or DEFAULT_JOB_TITLE,
            company=payload.get("company") or DEFAULT_COMPANY,
            status=ApplicationStatus.PENDING,
            cover_letter=None,
        ))
        app_log = get_logger(__name__, application.id)
        app_log.info(f"Created pending application for vacancy {vacancy_id}")

        if user_id:
            task = asyncio.create_task(self._invalidate_compatibility(user_id, vacancy_id))
            self._side_tasks.add(task)
            task.add_done_callback(self._side_tasks.discard)

        ack = SubmissionAck(application_id=application.id)
        self.queue.enqueue(
            application.id,
            self.process_application(
                application.id,
                user_id=user_id or None,
                vacancy=vacancy_from_payload(vacancy_id, payload),
                resume_text=resume_text,
                is_demo=is_demo,
            ),
        )
        return ack

    async def _invalidate_compatibility(self, user_id: str, vacancy_id: str) -> None:
        try:
            await asyncio.to_thread(self.compatibility.delete, user_id, vacancy_id)
        except Exception as e:
            logger.error(f"Error deleting compatibility for {user_id}/{vacancy_id}: {e}")

    async def drain(self) -> None:
        """Wait for scheduled compatibility invalidations (tests, shutdown)."""
        if self._side_tasks:
            await asyncio.gather(*list(self._side_tasks), return_exceptions=True)

    async def _record(self, application_id: str, **fields: Any) -> None:
        await asyncio.to_thread(self.applications.update, application_id, **fields)

    # ===== Background phase =====

    async def process_application(
        self,
        application_id: str,
        user_id: Optional[str],
        vacancy: Vacancy,
        resume_text: Optional[str] = None,
        is_demo: bool = False,
    ) -> None:
        """
        Run the background phase for one application.

        Every outcome ends as one update of the record; no exception escapes.
        """
        app_log = get_logger(__name__, application_id)
        try:
            await self._process(app_log, application_id, user_id, vacancy, resume_text, is_demo)
        except Exception:
            app_log.exception("Background processing error")
            try:
                await self._record(
                    application_id,
                    status=ApplicationStatus.FAILED,
                    error_reason=REASON_INTERNAL,
                )
            except Exception:
                app_log.exception("Could not record internal failure")

    async def _process(
        self,
        app_log,
        application_id: str,
        user_id: Optional[str],
        vacancy: Vacancy,
        resume_text: Optional[str],
        is_demo: bool,
    ) -> None:
        app_log.info("Starting background processing")

        # Resume text: a signed-in user always uses the selected resume
        if user_id:
            selected = await asyncio.to_thread(self.resumes.get_selected, user_id)
            letter_resume = selected.content if selected and selected.content else ""
            app_log.debug(f"Loaded selected resume, length: {len(letter_resume)}")
        else:
            letter_resume = resume_text or ""

        try:
            cover_letter = await self.cover_letters.generate(letter_resume, vacancy)
            app_log.info("Cover letter generated")
        except Exception as e:
            app_log.error(f"Cover letter generation failed: {e}")
            cover_letter = COVER_LETTER_ERROR

        if is_demo or not user_id:
            await self._record(
                application_id,
                cover_letter=cover_letter,
                status=ApplicationStatus.DEMO,
            )
            app_log.info("Demo application completed")
            return

        access_token = await self.token_manager.get_valid_access_token(user_id)
        if not access_token:
            await self._record(
                application_id,
                cover_letter=cover_letter,
                status=ApplicationStatus.FAILED,
                error_reason=REASON_NOT_AUTHENTICATED,
            )
            app_log.warning("No valid hh.ru token")
            return

        # TODO: reuse the resume loaded above instead of reading it a second time
        selected = await asyncio.to_thread(self.resumes.get_selected, user_id)
        if selected is None or not selected.hh_resume_id:
            await self._record(
                application_id,
                cover_letter=cover_letter,
                status=ApplicationStatus.FAILED,
                error_reason=REASON_NO_RESUME,
            )
            app_log.warning("No hh.ru resume selected")
            return

        result = await self.hh_client.apply_to_vacancy(
            access_token,
            vacancy.id,
            selected.hh_resume_id,
            cover_letter,
        )

        if result.ok:
            await self._record(
                application_id,
                cover_letter=cover_letter,
                resume_id=selected.id,
                status=ApplicationStatus.SUCCESS,
                hh_negotiation_id=result.negotiation_id,
            )
            app_log.info(f"hh.ru application succeeded, negotiation {result.negotiation_id}")
            return

        reason = REASON_TEST_REQUIRED if result.requires_test else (result.error or REASON_INTERNAL)
        await self._record(
            application_id,
            cover_letter=cover_letter,
            resume_id=selected.id,
            status=ApplicationStatus.FAILED,
            error_reason=reason,
        )
        app_log.warning(f"hh.ru application failed: {result.error}")

    # ===== Direct apply (legacy synchronous flow) =====

    async def apply_now(
        self,
        user_id: Optional[str],
        vacancy_id: Optional[str],
        cover_letter: Optional[str] = None,
    ) -> Application:
        """
        Submit to hh.ru within the request and record the outcome.

        The cover letter is sent as given, none is generated. Title and
        company come from the public vacancy detail when hh.ru returns it.

        Returns:
            The stored application, status SUCCESS or FAILED

        Raises:
            ValidationError: If user_id or vacancy_id is missing
            NotAuthenticatedError: If the user has no valid hh.ru token
            NoResumeSelectedError: If no hh.ru resume is selected
        """
        if not user_id or not vacancy_id:
            raise ValidationError("User ID and Vacancy ID required")
        vacancy_id = str(vacancy_id)

        access_token = await self.token_manager.get_valid_access_token(user_id)
        if not access_token:
            raise NotAuthenticatedError("Not authenticated with HH.ru")

        selected = await asyncio.to_thread(self.resumes.get_selected, user_id)
        if selected is None or not selected.hh_resume_id:
            raise NoResumeSelectedError("No resume selected")

        logger.info(f"Applying to vacancy {vacancy_id} with resume {selected.hh_resume_id}")
        result = await self.hh_client.apply_to_vacancy(
            access_token, vacancy_id, selected.hh_resume_id, cover_letter or "",
        )

        job_title, company = DEFAULT_JOB_TITLE, DEFAULT_COMPANY
        try:
            detail = await self.hh_client.get_vacancy(vacancy_id)
            job_title = detail.get("name") or job_title
            company = (detail.get("employer") or {}).get("name") or company
        except (HHApiError, AttributeError) as e:
            logger.warning(f"No vacancy detail for {vacancy_id}: {e}")

        application = Application(
            user_id=user_id,
            vacancy_id=vacancy_id,
            job_title=job_title,
            company=company,
            resume_id=selected.id,
            cover_letter=cover_letter,
        )
        if result.ok:
            application.status = ApplicationStatus.SUCCESS
            application.hh_negotiation_id = result.negotiation_id
        else:
            application.status = ApplicationStatus.FAILED
            application.error_reason = (
                REASON_TEST_REQUIRED if result.requires_test else (result.error or REASON_INTERNAL)
            )

        application = await asyncio.to_thread(self.applications.create, application)
        logger.info(f"Direct application {application.id}: {application.status.value}")
        return application

    def record_application(self, application: Application) -> Application:
        """Store an application built by the client as is."""
        return self.applications.create(application)

    # ===== Polling =====

    def get_application(self, application_id: str) -> Application:
        """
        Raises:
            NotFoundError: If the application does not exist
        """
        application = self.applications.get(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    def list_applications(self, user_id: str) -> List[Application]:
        if not user_id:
            raise ValidationError("User ID is required")
        return self.applications.list_for_user(user_id)

    def get_pending_count(self, user_id: Optional[str]) -> int:
        """In-flight applications whose cover letter is still being generated."""
        if not user_id:
            return 0
        return self.applications.count_pending(user_id, ApplicationStatus.in_flight())

    def update_cover_letter(self, application_id: str, cover_letter: str) -> Application:
        updated = self.applications.update_cover_letter(application_id, cover_letter)
        if updated is None:
            raise NotFoundError("Application not found")
        return updated
