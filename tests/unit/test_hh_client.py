"""
Unit tests for jobswipe/services/hh_client.py

hh.ru is replaced by an httpx.MockTransport handler. Tests cover:
- Search parameters and batch paging
- Vacancy normalization (salary, employment type, logo, tags)
- Detail enrichment degrading on failure
- Cached area tree
- Negotiation outcomes (201, hh.ru errors, network errors, missing Location)
"""

import httpx
import pytest

from jobswipe.common.errors import HHApiError
from jobswipe.common.models import VacancyFilters
from jobswipe.services.hh_client import (
    HHClient,
    fix_logo_url,
    flatten_areas,
    format_salary,
    map_employment_type,
)


def search_item(vacancy_id, **overrides):
    item = {
        "id": vacancy_id,
        "name": "Маркетолог",
        "employer": {
            "name": "Ромашка",
            "logo_urls": {"240": "https://img.hhcdn.ru/employer-logo-round/1.png"},
        },
        "salary": {"from": 120000, "to": 180000, "currency": "RUR"},
        "snippet": {"responsibility": "Вести <highlighttext>рекламные</highlighttext> кампании"},
        "area": {"name": "Москва"},
        "employment": {"id": "full"},
        "schedule": {"id": "remote"},
        "professional_roles": [{"name": "Маркетолог-аналитик"}],
        "alternate_url": f"https://hh.ru/vacancy/{vacancy_id}",
    }
    item.update(overrides)
    return item


class TestFormatting:

    def test_salary_range(self):
        assert format_salary({"from": 120000, "to": 180000, "currency": "RUR"}) == "120–180k ₽"

    def test_salary_from_only(self):
        assert format_salary({"from": 90000, "currency": "RUR"}) == "от 90k ₽"

    def test_salary_to_only_keeps_foreign_currency(self):
        assert format_salary({"to": 3000, "currency": "USD"}) == "до 3k USD"

    def test_salary_missing(self):
        assert format_salary(None) == "Зарплата не указана"
        assert format_salary({"currency": "RUR"}) == "Зарплата не указана"

    @pytest.mark.parametrize("employment,schedule,expected", [
        ({"id": "full"}, {"id": "remote"}, "remote"),
        ({"id": "full"}, {"id": "flexible"}, "hybrid"),
        ({"id": "part"}, {"id": "fullDay"}, "part-time"),
        ({"id": "full"}, {"id": "fullDay"}, "full-time"),
        (None, None, "full-time"),
    ])
    def test_employment_type(self, employment, schedule, expected):
        assert map_employment_type(employment, schedule) == expected

    def test_logo_round_variant_replaced(self):
        url = fix_logo_url({"240": "https://img.hhcdn.ru/employer-logo-round/1.png"})
        assert url == "https://img.hhcdn.ru/employer-logo/1.png"

    def test_logo_missing(self):
        assert fix_logo_url(None) is None

    def test_flatten_areas_depth_first(self):
        tree = [{"id": "113", "name": "Россия", "areas": [
            {"id": "1", "name": "Москва", "areas": []},
            {"id": "2", "name": "Санкт-Петербург", "areas": []},
        ]}]
        assert [a.id for a in flatten_areas(tree)] == ["113", "1", "2"]


class TestSearchVacancies:

    @pytest.mark.asyncio
    async def test_sends_batch_as_page_and_filters(self, mock_http_factory):
        seen = {}

        def handler(request: httpx.Request):
            if request.url.path == "/vacancies":
                seen["params"] = request.url.params
                return httpx.Response(200, json={"items": [], "found": 0, "pages": 0})
            return httpx.Response(404)

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        filters = VacancyFilters(
            text="SMM",
            areas=["1", "2"],
            employment="full",
            schedule="all",
            experience="between1And3",
        )
        await client.search_vacancies(filters, batch=3)

        params = seen["params"]
        assert params["text"] == "SMM"
        assert params["page"] == "2"
        assert params["per_page"] == "30"
        assert params.get_list("area") == ["1", "2"]
        assert params["employment"] == "full"
        assert params["experience"] == "between1And3"
        assert "schedule" not in params

    @pytest.mark.asyncio
    async def test_defaults_text_and_area(self, mock_http_factory):
        seen = {}

        def handler(request):
            seen["params"] = request.url.params
            return httpx.Response(200, json={"items": [], "found": 0, "pages": 0})

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        await client.search_vacancies(VacancyFilters(), batch=1)

        assert seen["params"]["text"] == "маркетинг"
        assert seen["params"].get_list("area") == ["1"]
        assert seen["params"]["page"] == "0"

    @pytest.mark.asyncio
    async def test_adapts_and_enriches_vacancies(self, mock_http_factory):
        def handler(request):
            if request.url.path == "/vacancies":
                return httpx.Response(200, json={"items": [search_item("101")], "found": 95, "pages": 4})
            if request.url.path == "/vacancies/101":
                return httpx.Response(200, json={
                    "description": "<p>Запуск <strong>кампаний</strong></p>",
                    "key_skills": [{"name": "SEO"}, {"name": "Яндекс Директ"}],
                })
            return httpx.Response(404)

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        page = await client.search_vacancies(VacancyFilters(), batch=2)

        assert page.total == 95
        assert page.has_more is True
        assert page.batch == 2
        job = page.jobs[0]
        assert job.id == "101"
        assert job.company == "Ромашка"
        assert job.salary == "120–180k ₽"
        assert job.employment_type == "remote"
        assert job.description == "Вести рекламные кампании"
        assert job.description_full == "Запуск кампаний"
        assert job.tags == ["SEO", "Яндекс Директ"]
        assert job.logo_url == "https://img.hhcdn.ru/employer-logo/1.png"

    @pytest.mark.asyncio
    async def test_last_batch_has_no_more(self, mock_http_factory):
        def handler(request):
            return httpx.Response(200, json={"items": [], "found": 60, "pages": 2})

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        page = await client.search_vacancies(VacancyFilters(), batch=2)

        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_enrichment_failure_keeps_card(self, mock_http_factory):
        def handler(request):
            if request.url.path == "/vacancies":
                return httpx.Response(200, json={"items": [search_item("7")], "found": 1, "pages": 1})
            return httpx.Response(500, text="oops")

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        page = await client.search_vacancies(VacancyFilters(), batch=1)

        job = page.jobs[0]
        assert job.description_full == ""
        assert job.tags == ["Маркетолог-аналитик"]

    @pytest.mark.asyncio
    async def test_tags_capped(self, mock_http_factory):
        skills = [{"name": f"skill-{i}"} for i in range(10)]

        def handler(request):
            if request.url.path == "/vacancies":
                return httpx.Response(200, json={"items": [search_item("8")], "found": 1, "pages": 1})
            return httpx.Response(200, json={"description": "", "key_skills": skills})

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        page = await client.search_vacancies(VacancyFilters(), batch=1)

        assert len(page.jobs[0].tags) == 6

    @pytest.mark.asyncio
    async def test_non_json_search_body_raises_api_error(self, mock_http_factory):
        client = HHClient(
            mock_http_factory(lambda request: httpx.Response(200, text="<html>maintenance</html>")),
            base_url="https://api.test",
        )
        with pytest.raises(HHApiError):
            await client.search_vacancies(VacancyFilters(), batch=1)

    @pytest.mark.asyncio
    async def test_non_object_search_body_raises_api_error(self, mock_http_factory):
        client = HHClient(
            mock_http_factory(lambda request: httpx.Response(200, json=["unexpected"])),
            base_url="https://api.test",
        )
        with pytest.raises(HHApiError):
            await client.search_vacancies(VacancyFilters(), batch=1)

    @pytest.mark.asyncio
    async def test_search_failure_raises(self, mock_http_factory):
        client = HHClient(
            mock_http_factory(lambda request: httpx.Response(503)),
            base_url="https://api.test",
        )
        with pytest.raises(HHApiError) as exc_info:
            await client.search_vacancies(VacancyFilters(), batch=1)
        assert exc_info.value.http_status == 503


class TestAreas:

    @pytest.mark.asyncio
    async def test_areas_fetched_once(self, mock_http_factory):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return httpx.Response(200, json=[{"id": "1", "name": "Москва", "areas": []}])

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        first = await client.get_areas()
        second = await client.get_areas()

        assert [a.name for a in first] == ["Москва"]
        assert second == first
        assert calls == ["/areas"]

    @pytest.mark.asyncio
    async def test_cold_cache_failure_raises(self, mock_http_factory):
        client = HHClient(mock_http_factory(lambda r: httpx.Response(500)), base_url="https://api.test")
        with pytest.raises(HHApiError):
            await client.get_areas()


class TestApplyToVacancy:

    @pytest.mark.asyncio
    async def test_created_returns_negotiation_id(self, mock_http_factory):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = request.content.decode()
            return httpx.Response(201, headers={"Location": "/negotiations/nid-555"})

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "Имею опыт")

        assert result.ok
        assert result.negotiation_id == "nid-555"
        assert seen["auth"] == "Bearer tok"
        assert "vacancy_id=101" in seen["body"]
        assert "resume_id=res-1" in seen["body"]

    @pytest.mark.asyncio
    async def test_hh_error_description(self, mock_http_factory):
        def handler(request):
            return httpx.Response(403, json={
                "description": "Resume not found",
                "errors": [{"type": "negotiations", "value": "resume_not_found"}],
            })

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "msg")

        assert not result.ok
        assert result.error == "Resume not found"
        assert result.http_status == 403
        assert result.requires_test is False

    @pytest.mark.asyncio
    async def test_test_required_detected(self, mock_http_factory):
        def handler(request):
            return httpx.Response(400, json={
                "errors": [{"type": "negotiations", "value": "test_required"}],
            })

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "msg")

        assert result.error == "HTTP 400"
        assert result.requires_test is True

    @pytest.mark.asyncio
    async def test_network_error_never_raises(self, mock_http_factory):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "msg")

        assert not result.ok
        assert result.error == "Ошибка соединения с hh.ru: ConnectError"

    @pytest.mark.asyncio
    async def test_success_without_location_is_failure(self, mock_http_factory):
        client = HHClient(mock_http_factory(lambda r: httpx.Response(204)), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "msg")

        assert not result.ok
        assert "без Location" in result.error

    @pytest.mark.asyncio
    async def test_plain_string_errors_keep_description(self, mock_http_factory):
        def handler(request):
            return httpx.Response(403, json={"description": "Vacancy archived", "errors": ["archived"]})

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "msg")

        assert not result.ok
        assert result.error == "Vacancy archived"
        assert result.errors == []
        assert result.requires_test is False

    @pytest.mark.asyncio
    async def test_errors_not_a_list_ignored(self, mock_http_factory):
        def handler(request):
            return httpx.Response(400, json={"description": "Bad", "errors": "weird"})

        client = HHClient(mock_http_factory(handler), base_url="https://api.test")
        result = await client.apply_to_vacancy("tok", "101", "res-1", "msg")

        assert result.error == "Bad"
        assert result.errors == []
