"""
Repository Interface Definitions

Defines the abstract store interfaces for JobSwipe entities. Services depend
on these interfaces only, so the MongoDB implementations can be swapped for
in-memory ones in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from ..models import (
    Application,
    ApplicationStatus,
    CompatibilityScore,
    Job,
    JobQuery,
    Resume,
    Swipe,
    SwipeDirection,
    User,
)


class UserRepositoryInterface(ABC):

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_hh_user_id(self, hh_user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def upsert_from_oauth(
        self,
        hh_user_id: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """
        Create the user on first login or refresh tokens and profile fields.

        Returns:
            The stored user with its id
        """
        pass

    @abstractmethod
    def update_tokens(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> None:
        """Persist a refreshed token pair and its expiry in a single write."""
        pass


class ResumeRepositoryInterface(ABC):

    @abstractmethod
    def get(self, resume_id: str) -> Optional[Resume]:
        pass

    @abstractmethod
    def get_selected(self, user_id: str) -> Optional[Resume]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[Resume]:
        pass

    @abstractmethod
    def upsert_hh_resume(
        self,
        user_id: str,
        hh_resume_id: str,
        title: Optional[str],
        content: str,
        content_json: Dict[str, Any],
        select_if_new: bool = False,
    ) -> Resume:
        """
        Insert or update the resume keyed by (user_id, hh_resume_id).

        select_if_new only applies when a new record is created.
        """
        pass

    @abstractmethod
    def select(self, user_id: str, resume_id: str) -> Optional[Resume]:
        """
        Deselect all of the user's resumes, then select one.

        Returns:
            The selected resume, None if it does not belong to the user
        """
        pass

    @abstractmethod
    def get_manual(self, user_id: str) -> Optional[Resume]:
        pass

    @abstractmethod
    def save_manual(self, user_id: str, content: str) -> Resume:
        pass


class SwipeRepositoryInterface(ABC):

    @abstractmethod
    def exists(self, user_id: str, vacancy_id: str) -> bool:
        pass

    @abstractmethod
    def create(self, user_id: str, vacancy_id: str, direction: SwipeDirection) -> Swipe:
        """
        Insert a swipe.

        Raises:
            DuplicateSwipeError: If (user_id, vacancy_id) already exists
        """
        pass

    @abstractmethod
    def swiped_vacancy_ids(self, user_id: str) -> Set[str]:
        pass

    @abstractmethod
    def history(self, user_id: str) -> List[Swipe]:
        """All swipes of the user, newest first."""
        pass

    @abstractmethod
    def delete_all(self, user_id: str) -> int:
        pass


class ApplicationRepositoryInterface(ABC):

    @abstractmethod
    def create(self, application: Application) -> Application:
        """Insert and return the application with its id set."""
        pass

    @abstractmethod
    def get(self, application_id: str) -> Optional[Application]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[Application]:
        """Applications of the user, newest first."""
        pass

    @abstractmethod
    def update(self, application_id: str, **fields: Any) -> None:
        """Set the given fields on one application."""
        pass

    @abstractmethod
    def update_cover_letter(self, application_id: str, cover_letter: str) -> Optional[Application]:
        pass

    @abstractmethod
    def count_pending(self, user_id: str, statuses: List[ApplicationStatus]) -> int:
        """Count applications in one of statuses whose cover letter is still None."""
        pass


class CompatibilityRepositoryInterface(ABC):

    @abstractmethod
    def get(self, user_id: str, vacancy_id: str) -> Optional[CompatibilityScore]:
        pass

    @abstractmethod
    def save(self, score: CompatibilityScore) -> None:
        """Upsert keyed by (user_id, vacancy_id)."""
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> List[CompatibilityScore]:
        pass

    @abstractmethod
    def delete(self, user_id: str, vacancy_id: str) -> None:
        pass


class JobRepositoryInterface(ABC):

    @abstractmethod
    def create(self, job: Job) -> Job:
        pass

    @abstractmethod
    def find(self, query: JobQuery) -> List[Job]:
        """Catalog jobs matching every set field of query, newest first."""
        pass


class DuplicateSwipeError(Exception):
    """The (user, vacancy) pair already has a swipe."""
