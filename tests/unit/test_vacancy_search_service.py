"""
Unit tests for jobswipe/services/vacancy_search_service.py
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from jobswipe.common.models import Area, Vacancy, VacancyFilters, VacancyPage
from jobswipe.services.swipe_service import SwipeService
from jobswipe.services.vacancy_search_service import VacancySearchService


def page_of(*ids):
    jobs = [Vacancy(id=i, title=f"Вакансия {i}", company="Ромашка") for i in ids]
    return VacancyPage(jobs=jobs, has_more=True, total=100, batch=1)


@pytest.fixture
def hh_client():
    client = MagicMock()
    client.search_vacancies = AsyncMock(return_value=page_of("1", "2", "3"))
    client.get_areas = AsyncMock(return_value=[Area(id="1", name="Москва")])
    return client


@pytest.fixture
def service(repositories, hh_client):
    swipes = SwipeService(repositories.swipes, repositories.compatibility)
    return VacancySearchService(hh_client, swipes)


@pytest.mark.asyncio
async def test_filters_swiped_vacancies(service, repositories):
    await service.swipes.record_swipe("u1", "2", "left")

    page = await service.search(VacancyFilters(), batch=1, user_id="u1")

    assert [j.id for j in page.jobs] == ["1", "3"]
    assert page.total == 100
    assert page.has_more is True


@pytest.mark.asyncio
async def test_anonymous_search_not_filtered(service, hh_client):
    page = await service.search(VacancyFilters(text="SMM"), batch=2)

    assert len(page.jobs) == 3
    hh_client.search_vacancies.assert_awaited_once_with(VacancyFilters(text="SMM"), 2)


@pytest.mark.asyncio
async def test_areas_delegates_to_client(service):
    assert await service.areas() == [Area(id="1", name="Москва")]
