"""
Service container.

Builds every JobSwipe component once per process and wires them together.
The FastAPI app stores the container on app.state; tests build one from
in-memory repositories and a mocked HTTP transport.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from jobswipe.common.config import Config
from jobswipe.common.database import MongoDatabase
from jobswipe.common.repositories import Repositories, build_repositories
from jobswipe.services.application_pipeline import ApplicationPipeline
from jobswipe.services.application_queue import ApplicationQueue
from jobswipe.services.compatibility_scorer import CompatibilityScorer
from jobswipe.services.cover_letter_service import CoverLetterGenerator
from jobswipe.services.hh_auth import HHOAuthClient, TokenManager
from jobswipe.services.hh_client import HHClient
from jobswipe.services.job_catalog_service import JobCatalogService
from jobswipe.services.oauth_login_service import OAuthLoginService
from jobswipe.services.resume_sync_service import ResumeSyncService
from jobswipe.services.swipe_service import SwipeService
from jobswipe.services.vacancy_search_service import VacancySearchService

from .config import ServiceSettings

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    repositories: Repositories
    http: httpx.AsyncClient
    hh_client: HHClient
    token_manager: TokenManager
    cover_letters: CoverLetterGenerator
    compatibility: CompatibilityScorer
    swipes: SwipeService
    search: VacancySearchService
    resumes: ResumeSyncService
    login: OAuthLoginService
    queue: ApplicationQueue
    pipeline: ApplicationPipeline
    catalog: JobCatalogService
    database: Optional[MongoDatabase] = None

    def is_ready(self) -> bool:
        """True when storage answers (always true without a real database)."""
        return self.database is None or self.database.ping()

    async def close(self) -> None:
        await self.http.aclose()
        if self.database is not None:
            self.database.disconnect()


def build_services(
    repositories: Repositories,
    http: httpx.AsyncClient,
    database: Optional[MongoDatabase] = None,
    cover_letter_llm: Optional[Any] = None,
    compatibility_llm: Optional[Any] = None,
    api_key: Optional[str] = None,
) -> ServiceContainer:
    """Wire services on top of the given repositories and HTTP client."""
    hh_client = HHClient(http)
    oauth = HHOAuthClient(http)
    token_manager = TokenManager(repositories.users, oauth)
    cover_letters = CoverLetterGenerator(llm=cover_letter_llm, api_key=api_key)
    compatibility = CompatibilityScorer(
        resumes=repositories.resumes,
        cache=repositories.compatibility,
        llm=compatibility_llm,
        api_key=api_key,
    )
    swipes = SwipeService(repositories.swipes, repositories.compatibility)
    resumes = ResumeSyncService(repositories.resumes, repositories.users, hh_client, token_manager)
    queue = ApplicationQueue()

    return ServiceContainer(
        repositories=repositories,
        http=http,
        hh_client=hh_client,
        token_manager=token_manager,
        cover_letters=cover_letters,
        compatibility=compatibility,
        swipes=swipes,
        search=VacancySearchService(hh_client, swipes),
        resumes=resumes,
        login=OAuthLoginService(oauth, hh_client, repositories.users, resumes, token_manager),
        queue=queue,
        pipeline=ApplicationPipeline(
            applications=repositories.applications,
            resumes=repositories.resumes,
            compatibility=repositories.compatibility,
            cover_letters=cover_letters,
            token_manager=token_manager,
            hh_client=hh_client,
            queue=queue,
        ),
        catalog=JobCatalogService(repositories.jobs),
        database=database,
    )


def build_container(settings: ServiceSettings) -> ServiceContainer:
    """
    Connect to MongoDB and build the production container.

    Raises:
        DatabaseUnavailableError: If MongoDB fails the readiness ping
    """
    database = MongoDatabase(
        settings.mongodb_uri,
        database_name=settings.mongo_db_name,
        server_selection_timeout_ms=settings.mongo_timeout_ms,
    )
    database.connect()
    database.ensure_indexes()

    http = httpx.AsyncClient(timeout=Config.HH_TIMEOUT_SECONDS)
    logger.info(Config.summary())
    return build_services(build_repositories(database), http, database=database)
