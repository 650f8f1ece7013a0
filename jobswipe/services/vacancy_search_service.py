"""
Vacancy Search Service

Fetches one swipe batch from hh.ru and hides vacancies the user has already
swiped. Filtering happens after the page is fetched, so a batch may hold
fewer than BATCH_SIZE cards.
"""

import asyncio
import logging
from typing import List, Optional

from jobswipe.common.models import Area, VacancyFilters, VacancyPage
from jobswipe.services.hh_client import HHClient
from jobswipe.services.swipe_service import SwipeService

logger = logging.getLogger(__name__)


class VacancySearchService:

    def __init__(self, hh_client: HHClient, swipes: SwipeService):
        self.hh_client = hh_client
        self.swipes = swipes

    async def search(
        self,
        filters: VacancyFilters,
        batch: int = 1,
        user_id: Optional[str] = None,
    ) -> VacancyPage:
        page = await self.hh_client.search_vacancies(filters, batch)

        if user_id:
            swiped = await asyncio.to_thread(self.swipes.swiped_vacancy_ids, user_id)
            before = len(page.jobs)
            page.jobs = [job for job in page.jobs if job.id not in swiped]
            logger.info(
                f"Filtered swiped vacancies: {before} -> {len(page.jobs)} "
                f"(removed {before - len(page.jobs)})"
            )

        return page

    async def areas(self) -> List[Area]:
        return await self.hh_client.get_areas()
