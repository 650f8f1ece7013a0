"""
Repository Pattern for JobSwipe storage.

Usage:
    from jobswipe.common.repositories import build_repositories

    repos = build_repositories(database)
    repos.applications.get(application_id)
"""

from dataclasses import dataclass

from ..database import MongoDatabase
from .base import (
    ApplicationRepositoryInterface,
    CompatibilityRepositoryInterface,
    DuplicateSwipeError,
    JobRepositoryInterface,
    ResumeRepositoryInterface,
    SwipeRepositoryInterface,
    UserRepositoryInterface,
)
from .mongo_repository import (
    MongoApplicationRepository,
    MongoCompatibilityRepository,
    MongoJobRepository,
    MongoResumeRepository,
    MongoSwipeRepository,
    MongoUserRepository,
)


@dataclass
class Repositories:
    """Bundle of all stores, built once per process."""
    users: UserRepositoryInterface
    resumes: ResumeRepositoryInterface
    swipes: SwipeRepositoryInterface
    applications: ApplicationRepositoryInterface
    compatibility: CompatibilityRepositoryInterface
    jobs: JobRepositoryInterface


def build_repositories(database: MongoDatabase) -> Repositories:
    return Repositories(
        users=MongoUserRepository(database),
        resumes=MongoResumeRepository(database),
        swipes=MongoSwipeRepository(database),
        applications=MongoApplicationRepository(database),
        compatibility=MongoCompatibilityRepository(database),
        jobs=MongoJobRepository(database),
    )


__all__ = [
    "Repositories",
    "build_repositories",
    "DuplicateSwipeError",
    "UserRepositoryInterface",
    "ResumeRepositoryInterface",
    "SwipeRepositoryInterface",
    "ApplicationRepositoryInterface",
    "CompatibilityRepositoryInterface",
    "JobRepositoryInterface",
    "MongoUserRepository",
    "MongoResumeRepository",
    "MongoSwipeRepository",
    "MongoApplicationRepository",
    "MongoCompatibilityRepository",
    "MongoJobRepository",
]
