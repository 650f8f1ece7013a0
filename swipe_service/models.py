"""
Pydantic request/response models for the swipe service.

Request bodies use the camelCase names the web client sends.
"""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from jobswipe.common.models import Application, ApplicationStatus, Job, Vacancy


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class VacancyPayload(CamelModel):
    """Vacancy fields the client already has from the swipe card."""

    id: Optional[Union[str, int]] = None
    title: Optional[str] = None
    company: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    description_full: Optional[str] = Field(None, alias="descriptionFull")
    tags: Optional[List[str]] = None

    def to_vacancy(self, vacancy_id: Optional[str] = None) -> Vacancy:
        return Vacancy(
            id=str(vacancy_id if vacancy_id is not None else (self.id or "")),
            title=self.title or "",
            company=self.company or "",
            salary=self.salary or "",
            description=self.description or "",
            description_full=self.description_full or "",
            tags=list(self.tags or []),
        )


class ApplyAsyncRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    vacancy_id: Optional[Union[str, int]] = Field(None, alias="vacancyId")
    vacancy_data: Optional[VacancyPayload] = Field(None, alias="vacancyData")
    resume_text: Optional[str] = Field(None, alias="resumeText")
    is_demo: bool = Field(False, alias="isDemo")


class CoverLetterUpdateRequest(CamelModel):
    cover_letter: Any = Field(None, alias="coverLetter")


class CoverLetterGenerateRequest(CamelModel):
    resume: str = ""
    vacancy: VacancyPayload


class CompatibilityRequest(CamelModel):
    user_id: str = Field(..., alias="userId")
    vacancies: List[VacancyPayload]


class SwipeRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    vacancy_id: Optional[Union[str, int]] = Field(None, alias="vacancyId")
    direction: Optional[str] = None


class UserRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")


class SelectResumeRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    resume_id: Optional[Union[str, int]] = Field(None, alias="resumeId")


class ManualResumeRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    content: Any = None


class JobCreateRequest(CamelModel):
    title: str
    company: str
    salary: str
    description: str
    tags: List[str] = []
    employment_type: str = Field("full-time", alias="employmentType")
    location: str = "Москва"

    def to_job(self) -> Job:
        return Job(
            title=self.title,
            company=self.company,
            salary=self.salary,
            description=self.description,
            tags=list(self.tags),
            employment_type=self.employment_type,
            location=self.location,
        )


class DirectApplyRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId")
    vacancy_id: Optional[Union[str, int]] = Field(None, alias="vacancyId")
    cover_letter: Optional[str] = Field(None, alias="coverLetter")


class ApplicationCreateRequest(CamelModel):
    """A finished application the client recorded itself."""

    job_title: str = Field(..., alias="jobTitle")
    company: str
    user_id: Optional[str] = Field(None, alias="userId")
    vacancy_id: Optional[Union[str, int]] = Field(None, alias="vacancyId")
    job_id: Optional[Union[str, int]] = Field(None, alias="jobId")
    resume_id: Optional[str] = Field(None, alias="resumeId")
    cover_letter: Optional[str] = Field(None, alias="coverLetter")
    hh_negotiation_id: Optional[str] = Field(None, alias="hhNegotiationId")
    status: ApplicationStatus = ApplicationStatus.PENDING
    error_reason: Optional[str] = Field(None, alias="errorReason")

    def to_application(self) -> Application:
        return Application(
            user_id=self.user_id,
            vacancy_id=str(self.vacancy_id) if self.vacancy_id is not None else "",
            job_id=str(self.job_id) if self.job_id is not None else None,
            job_title=self.job_title,
            company=self.company,
            resume_id=self.resume_id,
            cover_letter=self.cover_letter,
            hh_negotiation_id=self.hh_negotiation_id,
            status=self.status,
            error_reason=self.error_reason,
        )


class HealthResponse(BaseModel):
    status: str
    database: str
    queued_applications: int
    timestamp: datetime
