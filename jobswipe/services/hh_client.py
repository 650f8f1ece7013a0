"""
hh.ru API Client

Async wrapper around the public and bearer-token hh.ru endpoints used by
JobSwipe: vacancy search with detail enrichment, the area tree, negotiations
(applications), the current user and their resumes.

API: https://api.hh.ru
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from jobswipe.common.config import Config
from jobswipe.common.errors import HHApiError
from jobswipe.common.models import (
    Area,
    NegotiationResult,
    Vacancy,
    VacancyFilters,
    VacancyPage,
)
from jobswipe.common.text_sanitizer import strip_html
from jobswipe.common.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

NO_SALARY = "Зарплата не указана"
NO_DESCRIPTION = "Описание отсутствует"


def format_salary(salary: Optional[Dict[str, Any]]) -> str:
    """
    Render an hh.ru salary object in thousands.

    Example:
        format_salary({"from": 120000, "to": 180000, "currency": "RUR"})
        # Returns: "120–180k ₽"
    """
    if not salary:
        return NO_SALARY

    low = salary.get("from")
    high = salary.get("to")
    currency = salary.get("currency") or ""
    symbol = "₽" if currency == "RUR" else currency

    if low and high:
        return f"{round(low / 1000)}–{round(high / 1000)}k {symbol}"
    if low:
        return f"от {round(low / 1000)}k {symbol}"
    if high:
        return f"до {round(high / 1000)}k {symbol}"
    return NO_SALARY


def map_employment_type(
    employment: Optional[Dict[str, Any]],
    schedule: Optional[Dict[str, Any]],
) -> str:
    """Collapse hh.ru employment/schedule ids into the card's employment type."""
    schedule_id = (schedule or {}).get("id")
    employment_id = (employment or {}).get("id")

    if schedule_id == "remote":
        return "remote"
    if schedule_id == "flexible":
        return "hybrid"
    if employment_id == "part":
        return "part-time"
    return "full-time"


def fix_logo_url(logo_urls: Optional[Dict[str, str]]) -> Optional[str]:
    """Pick the 240px logo and swap the round variant for the square one."""
    if not logo_urls:
        return None
    url = logo_urls.get("240") or logo_urls.get("original")
    if url and "employer-logo-round" in url:
        url = url.replace("employer-logo-round", "employer-logo")
    return url


def flatten_areas(nodes: List[Dict[str, Any]]) -> List[Area]:
    """Depth-first flatten of the hh.ru area tree."""
    flat: List[Area] = []

    def walk(node: Dict[str, Any]) -> None:
        if node.get("id") and node.get("name"):
            flat.append(Area(id=str(node["id"]), name=node["name"]))
        for child in node.get("areas") or []:
            walk(child)

    for node in nodes:
        walk(node)
    return flat


def _requires_test(message: str, errors: List[Dict[str, Any]]) -> bool:
    if "тест" in message.lower():
        return True
    return any(
        e.get("type") == "negotiations" and "test" in str(e.get("value", ""))
        for e in errors
    )


def _error_details(body: Any) -> List[Dict[str, Any]]:
    """Field-level errors of an hh.ru error body; non-object entries are dropped."""
    errors = body.get("errors") if isinstance(body, dict) else None
    if not isinstance(errors, list):
        return []
    return [e for e in errors if isinstance(e, dict)]


class HHClient:
    """
    hh.ru API client.

    Usage:
        async with httpx.AsyncClient() as http:
            client = HHClient(http)
            page = await client.search_vacancies(VacancyFilters(text="SMM"), batch=1)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        areas_cache: Optional[TTLCache] = None,
    ):
        self.http = http
        self.base_url = (base_url or Config.HH_API_URL).rstrip("/")
        self.user_agent = user_agent or Config.HH_USER_AGENT
        self.areas_cache = areas_cache or TTLCache(Config.AREAS_CACHE_TTL_SECONDS)

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _get_json(
        self,
        path: str,
        params: Any = None,
        access_token: Optional[str] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http.get(
                url,
                params=params,
                headers=self._headers(access_token),
                timeout=Config.HH_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            raise HHApiError(f"hh.ru request failed: GET {path}: {e}") from e

        if response.status_code != 200:
            logger.error(f"hh.ru GET {path} failed: {response.status_code} {response.text[:300]}")
            raise HHApiError(
                f"hh.ru API error: {response.status_code}",
                http_status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise HHApiError(f"hh.ru returned invalid JSON for GET {path}") from e

    # ===== Vacancies =====

    async def search_vacancies(self, filters: VacancyFilters, batch: int = 1) -> VacancyPage:
        """
        Fetch one swipe batch (one hh.ru page of BATCH_SIZE vacancies).

        Args:
            filters: Search text, areas and optional employment/schedule/experience
            batch: 1-based batch number

        Returns:
            VacancyPage with enriched vacancies and has_more = batch < pages

        Raises:
            HHApiError: If the search request fails
        """
        batch = max(1, batch)
        params: List[tuple] = [
            ("text", filters.text or Config.DEFAULT_SEARCH_TEXT),
            ("per_page", str(Config.BATCH_SIZE)),
            ("page", str(batch - 1)),
        ]
        for area in filters.areas or Config.DEFAULT_AREAS:
            params.append(("area", area))
        for name in ("employment", "schedule", "experience"):
            value = getattr(filters, name)
            if value and value != "all":
                params.append((name, value))

        logger.info(f"Fetching hh.ru batch {batch} (page {batch - 1})")
        data = await self._get_json("/vacancies", params=params)
        if not isinstance(data, dict):
            raise HHApiError("hh.ru returned an unexpected vacancy search body")

        items = data.get("items") or []
        jobs = await asyncio.gather(*(self._adapt_vacancy(item) for item in items))
        pages = int(data.get("pages") or 0)
        total = int(data.get("found") or 0)

        logger.info(
            f"hh.ru batch {batch}: got {len(jobs)} jobs, "
            f"total found: {total}, pages: {pages}"
        )
        return VacancyPage(jobs=list(jobs), has_more=batch < pages, total=total, batch=batch)

    async def get_vacancy(self, vacancy_id: str) -> Dict[str, Any]:
        """Raw vacancy detail from GET /vacancies/{id}."""
        return await self._get_json(f"/vacancies/{vacancy_id}")

    async def _adapt_vacancy(self, item: Dict[str, Any]) -> Vacancy:
        vacancy_id = str(item.get("id"))
        snippet = item.get("snippet") or {}
        short = snippet.get("responsibility") or snippet.get("requirement") or NO_DESCRIPTION

        full_description = ""
        key_skills: List[str] = []
        try:
            detail = await self.get_vacancy(vacancy_id)
            if not isinstance(detail, dict):
                raise HHApiError(f"Unexpected detail body for vacancy {vacancy_id}")
            full_description = strip_html(detail.get("description") or "")
            key_skills = [
                s.get("name") for s in detail.get("key_skills") or [] if s.get("name")
            ]
        except (HHApiError, ValueError) as e:
            logger.warning(f"Failed to load full description for vacancy {vacancy_id}: {e}")

        roles = [r.get("name") for r in item.get("professional_roles") or [] if r.get("name")]
        tags = (key_skills or roles)[:Config.MAX_TAGS]

        employer = item.get("employer") or {}
        return Vacancy(
            id=vacancy_id,
            title=item.get("name") or "",
            company=employer.get("name") or "",
            salary=format_salary(item.get("salary")),
            description=strip_html(short),
            description_full=full_description,
            location=(item.get("area") or {}).get("name") or "",
            employment_type=map_employment_type(item.get("employment"), item.get("schedule")),
            tags=tags,
            url=item.get("alternate_url"),
            logo_url=fix_logo_url(employer.get("logo_urls")),
        )

    # ===== Areas =====

    async def get_areas(self) -> List[Area]:
        """
        Flattened area list, cached for AREAS_CACHE_TTL_SECONDS.

        Raises:
            HHApiError: If the cache is cold and the request fails
        """
        return await self.areas_cache.get_or_load(self._load_areas)

    async def _load_areas(self) -> List[Area]:
        data = await self._get_json("/areas")
        if not isinstance(data, list):
            raise HHApiError("hh.ru returned an unexpected area tree body")
        areas = flatten_areas(data)
        logger.info(f"Cached {len(areas)} hh.ru areas")
        return areas

    # ===== Negotiations =====

    async def apply_to_vacancy(
        self,
        access_token: str,
        vacancy_id: str,
        resume_id: str,
        message: str,
    ) -> NegotiationResult:
        """
        Submit an application (negotiation) on behalf of the user.

        Never raises: every failure is described by the returned result.
        """
        try:
            response = await self.http.post(
                f"{self.base_url}/negotiations",
                data={"vacancy_id": vacancy_id, "resume_id": resume_id, "message": message},
                headers=self._headers(access_token),
                timeout=Config.HH_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            logger.error(f"hh.ru apply request failed for vacancy {vacancy_id}: {e}")
            return NegotiationResult(error=f"Ошибка соединения с hh.ru: {e.__class__.__name__}")

        location = response.headers.get("Location")
        if response.status_code == 201 and location:
            return NegotiationResult(
                negotiation_id=location.rstrip("/").split("/")[-1],
                http_status=201,
            )

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            errors = _error_details(body)
            message_text = str(body.get("description") or body.get("error") or f"HTTP {response.status_code}")
            logger.error(f"hh.ru apply failed: {response.status_code} {body}")
            return NegotiationResult(
                error=message_text,
                errors=errors,
                http_status=response.status_code,
                requires_test=_requires_test(message_text, errors),
            )

        logger.error(f"hh.ru apply returned {response.status_code} without Location header")
        return NegotiationResult(
            error=f"Неожиданный ответ hh.ru: HTTP {response.status_code} без Location",
            http_status=response.status_code,
        )

    # ===== Current user =====

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """GET /me for the token owner."""
        return await self._get_json("/me", access_token=access_token)

    async def list_resumes(self, access_token: str) -> List[Dict[str, Any]]:
        """Short resume records from GET /resumes/mine."""
        data = await self._get_json("/resumes/mine", access_token=access_token)
        if not isinstance(data, dict):
            raise HHApiError("hh.ru returned an unexpected resume list body")
        return data.get("items") or []

    async def get_resume_detail(self, access_token: str, resume_id: str) -> Dict[str, Any]:
        return await self._get_json(f"/resumes/{resume_id}", access_token=access_token)
