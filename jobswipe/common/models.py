"""
Domain types for JobSwipe.

Stored entities (User, Resume, Swipe, Application, CompatibilityScore, Job)
convert to and from MongoDB documents; ids are ObjectId hex strings. The remaining
types describe hh.ru payloads after normalization.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes written by older code; aware values pass through."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ApplicationStatus(str, Enum):
    """Lifecycle of an Application record."""
    PENDING = "pending"
    QUEUED = "queued"
    DEMO = "demo"
    SUCCESS = "success"
    FAILED = "failed"

    @classmethod
    def in_flight(cls) -> List["ApplicationStatus"]:
        return [cls.PENDING, cls.QUEUED]

    @property
    def is_terminal(self) -> bool:
        return self in (ApplicationStatus.DEMO, ApplicationStatus.SUCCESS, ApplicationStatus.FAILED)


class SwipeDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class CompatibilityColor(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


def _doc_id(document: Dict[str, Any]) -> Optional[str]:
    raw = document.get("_id")
    return str(raw) if raw is not None else None


# ===== Stored entities =====

@dataclass
class User:
    hh_user_id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    hh_access_token: Optional[str] = None
    hh_refresh_token: Optional[str] = None
    hh_token_expires_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    id: Optional[str] = None

    @property
    def has_tokens(self) -> bool:
        return bool(self.hh_access_token and self.hh_refresh_token)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "User":
        return cls(
            id=_doc_id(document),
            hh_user_id=document.get("hh_user_id"),
            email=document.get("email"),
            first_name=document.get("first_name"),
            last_name=document.get("last_name"),
            hh_access_token=document.get("hh_access_token"),
            hh_refresh_token=document.get("hh_refresh_token"),
            hh_token_expires_at=as_utc(document.get("hh_token_expires_at")),
            created_at=as_utc(document.get("created_at")) or utc_now(),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        return doc

    def to_public_dict(self) -> Dict[str, Any]:
        """User fields safe to return to the client (no tokens)."""
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "hhUserId": self.hh_user_id,
        }


@dataclass
class Resume:
    """
    A resume owned by a user.

    hh_resume_id is None for the manually entered resume.
    """
    user_id: str
    content: str = ""
    hh_resume_id: Optional[str] = None
    title: Optional[str] = None
    content_json: Optional[Dict[str, Any]] = None
    selected: bool = False
    updated_at: datetime = field(default_factory=utc_now)
    id: Optional[str] = None

    @property
    def is_manual(self) -> bool:
        return self.hh_resume_id is None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Resume":
        return cls(
            id=_doc_id(document),
            user_id=document.get("user_id"),
            hh_resume_id=document.get("hh_resume_id"),
            title=document.get("title"),
            content=document.get("content") or "",
            content_json=document.get("content_json"),
            selected=bool(document.get("selected", False)),
            updated_at=as_utc(document.get("updated_at")) or utc_now(),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        return doc

    def to_dict(self, include_json: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "hhResumeId": self.hh_resume_id,
            "title": self.title,
            "content": self.content,
            "selected": self.selected,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_json:
            data["contentJson"] = self.content_json
        return data


@dataclass
class Swipe:
    user_id: str
    vacancy_id: str
    direction: SwipeDirection
    created_at: datetime = field(default_factory=utc_now)
    id: Optional[str] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Swipe":
        return cls(
            id=_doc_id(document),
            user_id=document["user_id"],
            vacancy_id=document["vacancy_id"],
            direction=SwipeDirection(document["direction"]),
            created_at=as_utc(document.get("created_at")) or utc_now(),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "vacancy_id": self.vacancy_id,
            "direction": self.direction.value,
            "created_at": self.created_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "vacancyId": self.vacancy_id,
            "direction": self.direction.value,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class Application:
    """
    One application attempt.

    Created as PENDING by the synchronous phase and mutated exactly once more
    by the background task. job_title and company are snapshots taken at
    submission time. job_id links an application to a local catalog job,
    vacancy_id is then empty unless the job also exists on hh.ru.
    """
    vacancy_id: str
    job_title: str
    company: str
    user_id: Optional[str] = None
    job_id: Optional[str] = None
    resume_id: Optional[str] = None
    cover_letter: Optional[str] = None
    hh_negotiation_id: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.PENDING
    error_reason: Optional[str] = None
    applied_at: datetime = field(default_factory=utc_now)
    id: Optional[str] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Application":
        return cls(
            id=_doc_id(document),
            user_id=document.get("user_id"),
            vacancy_id=document.get("vacancy_id"),
            job_id=document.get("job_id"),
            job_title=document.get("job_title"),
            company=document.get("company"),
            resume_id=document.get("resume_id"),
            cover_letter=document.get("cover_letter"),
            hh_negotiation_id=document.get("hh_negotiation_id"),
            status=ApplicationStatus(document.get("status", ApplicationStatus.PENDING.value)),
            error_reason=document.get("error_reason"),
            applied_at=as_utc(document.get("applied_at")) or utc_now(),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        doc["status"] = self.status.value
        return doc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "vacancyId": self.vacancy_id,
            "jobId": self.job_id,
            "jobTitle": self.job_title,
            "company": self.company,
            "resumeId": self.resume_id,
            "coverLetter": self.cover_letter,
            "hhNegotiationId": self.hh_negotiation_id,
            "status": self.status.value,
            "errorReason": self.error_reason,
            "appliedAt": self.applied_at.isoformat(),
        }


@dataclass
class CompatibilityResult:
    vacancy_id: str
    score: int
    color: CompatibilityColor
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vacancyId": self.vacancy_id,
            "score": self.score,
            "color": self.color.value,
            "explanation": self.explanation,
        }


@dataclass
class CompatibilityScore:
    """Cached compatibility result for one (user, vacancy) pair."""
    user_id: str
    vacancy_id: str
    score: int
    color: CompatibilityColor
    explanation: str
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "CompatibilityScore":
        return cls(
            user_id=document["user_id"],
            vacancy_id=document["vacancy_id"],
            score=int(document["score"]),
            color=CompatibilityColor(document["color"]),
            explanation=document.get("explanation", ""),
            created_at=as_utc(document.get("created_at")) or utc_now(),
        )

    @classmethod
    def from_result(cls, user_id: str, result: CompatibilityResult) -> "CompatibilityScore":
        return cls(
            user_id=user_id,
            vacancy_id=result.vacancy_id,
            score=result.score,
            color=result.color,
            explanation=result.explanation,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "vacancy_id": self.vacancy_id,
            "score": self.score,
            "color": self.color.value,
            "explanation": self.explanation,
            "created_at": self.created_at,
        }

    def to_result(self) -> CompatibilityResult:
        return CompatibilityResult(
            vacancy_id=self.vacancy_id,
            score=self.score,
            color=self.color,
            explanation=self.explanation,
        )


@dataclass
class Job:
    """A vacancy in the local catalog, entered through the API rather than fetched from hh.ru."""
    title: str
    company: str
    salary: str
    description: str
    tags: List[str] = field(default_factory=list)
    employment_type: str = "full-time"
    location: str = "Москва"
    created_at: datetime = field(default_factory=utc_now)
    id: Optional[str] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Job":
        return cls(
            id=_doc_id(document),
            title=document.get("title", ""),
            company=document.get("company", ""),
            salary=document.get("salary", ""),
            description=document.get("description", ""),
            tags=list(document.get("tags") or []),
            employment_type=document.get("employment_type") or "full-time",
            location=document.get("location") or "Москва",
            created_at=as_utc(document.get("created_at")) or utc_now(),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = asdict(self)
        doc.pop("id")
        return doc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "salary": self.salary,
            "description": self.description,
            "tags": self.tags,
            "employmentType": self.employment_type,
            "location": self.location,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class JobQuery:
    """
    Catalog lookup. company, employment_type and location must match exactly;
    company_contains, title_contains and keyword (title or description) match
    case-insensitive substrings. Unset fields do not filter.
    """
    company: Optional[str] = None
    employment_type: Optional[str] = None
    location: Optional[str] = None
    company_contains: Optional[str] = None
    title_contains: Optional[str] = None
    keyword: Optional[str] = None


# ===== hh.ru payloads =====

@dataclass
class Vacancy:
    """
    A vacancy as shown on a swipe card.

    description is the short snippet, description_full the enriched text used
    for cover letters and scoring.
    """
    id: str
    title: str
    company: str
    salary: str = ""
    description: str = ""
    description_full: str = ""
    location: str = ""
    employment_type: str = "full-time"
    tags: List[str] = field(default_factory=list)
    url: Optional[str] = None
    logo_url: Optional[str] = None

    @property
    def prompt_description(self) -> str:
        return self.description_full or self.description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "salary": self.salary,
            "description": self.description,
            "descriptionFull": self.description_full,
            "location": self.location,
            "employmentType": self.employment_type,
            "tags": list(self.tags),
            "url": self.url,
            "logoUrl": self.logo_url,
        }


@dataclass
class VacancyFilters:
    text: Optional[str] = None
    areas: List[str] = field(default_factory=list)
    employment: Optional[str] = None
    schedule: Optional[str] = None
    experience: Optional[str] = None


@dataclass
class VacancyPage:
    jobs: List[Vacancy]
    has_more: bool
    total: int
    batch: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobs": [job.to_dict() for job in self.jobs],
            "hasMore": self.has_more,
            "total": self.total,
            "batch": self.batch,
        }


@dataclass
class Area:
    id: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name}


@dataclass
class NegotiationResult:
    """
    Outcome of POST /negotiations.

    Exactly one of negotiation_id / error is set.
    """
    negotiation_id: Optional[str] = None
    error: Optional[str] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    http_status: Optional[int] = None
    requires_test: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.negotiation_id is not None


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass
class SubmissionAck:
    application_id: str
    status: str = ApplicationStatus.QUEUED.value
    message: str = "Отклик поставлен в очередь"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applicationId": self.application_id,
            "status": self.status,
            "message": self.message,
        }


@dataclass
class SwipeOutcome:
    already_swiped: bool
    swipe: Optional[Swipe] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"ok": True, "alreadySwiped": self.already_swiped}
        if self.swipe is not None:
            data["swipe"] = self.swipe.to_dict()
        return data
