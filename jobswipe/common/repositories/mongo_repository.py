"""
MongoDB repository implementations.

All repositories share one MongoDatabase injected at construction. Foreign
keys (user_id, resume_id) are stored as ObjectId hex strings.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..database import (
    AI_COMPATIBILITY,
    APPLICATIONS,
    JOBS,
    RESUMES,
    SWIPES,
    USERS,
    MongoDatabase,
)
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
    utc_now,
)
from .base import (
    ApplicationRepositoryInterface,
    CompatibilityRepositoryInterface,
    DuplicateSwipeError,
    JobRepositoryInterface,
    ResumeRepositoryInterface,
    SwipeRepositoryInterface,
    UserRepositoryInterface,
)

logger = logging.getLogger(__name__)


def _object_id(value: str) -> Optional[ObjectId]:
    """Convert a hex id to ObjectId, None for malformed ids."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class MongoUserRepository(UserRepositoryInterface):

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(USERS)

    def get(self, user_id: str) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        doc = self._collection.find_one({"_id": oid})
        return User.from_document(doc) if doc else None

    def get_by_hh_user_id(self, hh_user_id: str) -> Optional[User]:
        doc = self._collection.find_one({"hh_user_id": hh_user_id})
        return User.from_document(doc) if doc else None

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
        doc = self._collection.find_one_and_update(
            {"hh_user_id": hh_user_id},
            {
                "$set": {
                    "hh_access_token": access_token,
                    "hh_refresh_token": refresh_token,
                    "hh_token_expires_at": expires_at,
                    "email": email,
                    "first_name": first_name,
                    "last_name": last_name,
                },
                "$setOnInsert": {"created_at": utc_now()},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return User.from_document(doc)

    def update_tokens(
        self,
        user_id: str,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
    ) -> None:
        self._collection.update_one(
            {"_id": _object_id(user_id)},
            {
                "$set": {
                    "hh_access_token": access_token,
                    "hh_refresh_token": refresh_token,
                    "hh_token_expires_at": expires_at,
                }
            },
        )


class MongoResumeRepository(ResumeRepositoryInterface):

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(RESUMES)

    def get(self, resume_id: str) -> Optional[Resume]:
        oid = _object_id(resume_id)
        if oid is None:
            return None
        doc = self._collection.find_one({"_id": oid})
        return Resume.from_document(doc) if doc else None

    def get_selected(self, user_id: str) -> Optional[Resume]:
        doc = self._collection.find_one({"user_id": user_id, "selected": True})
        return Resume.from_document(doc) if doc else None

    def list_for_user(self, user_id: str) -> List[Resume]:
        cursor = self._collection.find({"user_id": user_id}).sort("updated_at", DESCENDING)
        return [Resume.from_document(doc) for doc in cursor]

    def upsert_hh_resume(
        self,
        user_id: str,
        hh_resume_id: str,
        title: Optional[str],
        content: str,
        content_json: Dict[str, Any],
        select_if_new: bool = False,
    ) -> Resume:
        doc = self._collection.find_one_and_update(
            {"user_id": user_id, "hh_resume_id": hh_resume_id},
            {
                "$set": {
                    "title": title,
                    "content": content,
                    "content_json": content_json,
                    "updated_at": utc_now(),
                },
                "$setOnInsert": {"selected": select_if_new},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return Resume.from_document(doc)

    def select(self, user_id: str, resume_id: str) -> Optional[Resume]:
        oid = _object_id(resume_id)
        if oid is None:
            return None
        self._collection.update_many({"user_id": user_id}, {"$set": {"selected": False}})
        doc = self._collection.find_one_and_update(
            {"_id": oid, "user_id": user_id},
            {"$set": {"selected": True}},
            return_document=ReturnDocument.AFTER,
        )
        return Resume.from_document(doc) if doc else None

    def get_manual(self, user_id: str) -> Optional[Resume]:
        doc = self._collection.find_one(
            {"user_id": user_id, "hh_resume_id": None},
            sort=[("updated_at", DESCENDING)],
        )
        return Resume.from_document(doc) if doc else None

    def save_manual(self, user_id: str, content: str) -> Resume:
        doc = self._collection.find_one_and_update(
            {"user_id": user_id, "hh_resume_id": None},
            {
                "$set": {"content": content, "updated_at": utc_now()},
                "$setOnInsert": {"selected": False, "title": None, "content_json": None},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return Resume.from_document(doc)


class MongoSwipeRepository(SwipeRepositoryInterface):

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(SWIPES)

    def exists(self, user_id: str, vacancy_id: str) -> bool:
        return self._collection.count_documents(
            {"user_id": user_id, "vacancy_id": vacancy_id}, limit=1
        ) > 0

    def create(self, user_id: str, vacancy_id: str, direction: SwipeDirection) -> Swipe:
        swipe = Swipe(user_id=user_id, vacancy_id=vacancy_id, direction=direction)
        try:
            result = self._collection.insert_one(swipe.to_document())
        except DuplicateKeyError as e:
            raise DuplicateSwipeError(f"{user_id}/{vacancy_id}") from e
        swipe.id = str(result.inserted_id)
        return swipe

    def swiped_vacancy_ids(self, user_id: str) -> Set[str]:
        cursor = self._collection.find({"user_id": user_id}, {"vacancy_id": 1, "_id": 0})
        return {doc["vacancy_id"] for doc in cursor}

    def history(self, user_id: str) -> List[Swipe]:
        cursor = self._collection.find({"user_id": user_id}).sort("created_at", DESCENDING)
        return [Swipe.from_document(doc) for doc in cursor]

    def delete_all(self, user_id: str) -> int:
        return self._collection.delete_many({"user_id": user_id}).deleted_count


class MongoApplicationRepository(ApplicationRepositoryInterface):

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(APPLICATIONS)

    def create(self, application: Application) -> Application:
        result = self._collection.insert_one(application.to_document())
        application.id = str(result.inserted_id)
        return application

    def get(self, application_id: str) -> Optional[Application]:
        oid = _object_id(application_id)
        if oid is None:
            return None
        doc = self._collection.find_one({"_id": oid})
        return Application.from_document(doc) if doc else None

    def list_for_user(self, user_id: str) -> List[Application]:
        cursor = self._collection.find({"user_id": user_id}).sort("applied_at", DESCENDING)
        return [Application.from_document(doc) for doc in cursor]

    def update(self, application_id: str, **fields: Any) -> None:
        if "status" in fields and isinstance(fields["status"], ApplicationStatus):
            fields["status"] = fields["status"].value
        self._collection.update_one({"_id": _object_id(application_id)}, {"$set": fields})

    def update_cover_letter(self, application_id: str, cover_letter: str) -> Optional[Application]:
        oid = _object_id(application_id)
        if oid is None:
            return None
        doc = self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"cover_letter": cover_letter}},
            return_document=ReturnDocument.AFTER,
        )
        return Application.from_document(doc) if doc else None

    def count_pending(self, user_id: str, statuses: List[ApplicationStatus]) -> int:
        return self._collection.count_documents({
            "user_id": user_id,
            "cover_letter": None,
            "status": {"$in": [s.value for s in statuses]},
        })


class MongoCompatibilityRepository(CompatibilityRepositoryInterface):

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(AI_COMPATIBILITY)

    def get(self, user_id: str, vacancy_id: str) -> Optional[CompatibilityScore]:
        doc = self._collection.find_one({"user_id": user_id, "vacancy_id": vacancy_id})
        return CompatibilityScore.from_document(doc) if doc else None

    def save(self, score: CompatibilityScore) -> None:
        self._collection.replace_one(
            {"user_id": score.user_id, "vacancy_id": score.vacancy_id},
            score.to_document(),
            upsert=True,
        )

    def list_for_user(self, user_id: str) -> List[CompatibilityScore]:
        cursor = self._collection.find({"user_id": user_id}).sort("created_at", DESCENDING)
        return [CompatibilityScore.from_document(doc) for doc in cursor]

    def delete(self, user_id: str, vacancy_id: str) -> None:
        self._collection.delete_one({"user_id": user_id, "vacancy_id": vacancy_id})


def _contains(value: str) -> Dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


class MongoJobRepository(JobRepositoryInterface):

    def __init__(self, database: MongoDatabase):
        self._collection = database.collection(JOBS)

    def create(self, job: Job) -> Job:
        result = self._collection.insert_one(job.to_document())
        job.id = str(result.inserted_id)
        return job

    def find(self, query: JobQuery) -> List[Job]:
        conditions: List[Dict[str, Any]] = []
        for name in ("company", "employment_type", "location"):
            value = getattr(query, name)
            if value:
                conditions.append({name: value})
        if query.company_contains:
            conditions.append({"company": _contains(query.company_contains)})
        if query.title_contains:
            conditions.append({"title": _contains(query.title_contains)})
        if query.keyword:
            keyword = _contains(query.keyword)
            conditions.append({"$or": [{"title": keyword}, {"description": keyword}]})

        selector = {"$and": conditions} if conditions else {}
        cursor = self._collection.find(selector).sort("created_at", DESCENDING)
        return [Job.from_document(doc) for doc in cursor]
