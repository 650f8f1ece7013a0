"""
Job Catalog Service

The local jobs collection: vacancies added through the API instead of
fetched from hh.ru. Supports browsing with exact-match filters (the swipe
deck), the option lists for those filters, substring search and creation.

Catalog salaries are free text such as "150k-200k ₽"; salary range filters
compare the first number in it, read as thousands.
"""

import logging
import re
from typing import Dict, List, Optional

from jobswipe.common.errors import ValidationError
from jobswipe.common.models import Job, JobQuery
from jobswipe.common.repositories import JobRepositoryInterface

logger = logging.getLogger(__name__)

ALL = "all"

# Range name -> inclusive (low, high) bounds of the salary's first number
SALARY_RANGES = {
    "under150": (None, 149),
    "150-200": (150, 200),
    "200plus": (200, None),
}


def salary_lower_bound(salary: str) -> Optional[int]:
    match = re.search(r"\d+", salary or "")
    return int(match.group()) if match else None


def in_salary_range(salary: str, salary_range: str) -> bool:
    """
    Raises:
        ValidationError: If salary_range is not one of SALARY_RANGES
    """
    if salary_range not in SALARY_RANGES:
        raise ValidationError(f"Unknown salary range: {salary_range}")
    value = salary_lower_bound(salary)
    if value is None:
        return False
    low, high = SALARY_RANGES[salary_range]
    return (low is None or value >= low) and (high is None or value <= high)


def _selected(value: Optional[str]) -> Optional[str]:
    """Filter value, None when empty or "all"."""
    if not value or value == ALL:
        return None
    return value


class JobCatalogService:

    def __init__(self, jobs: JobRepositoryInterface):
        self.jobs = jobs

    def list_jobs(self) -> List[Job]:
        return self.jobs.find(JobQuery())

    def browse(
        self,
        company: Optional[str] = None,
        salary_range: Optional[str] = None,
        employment_type: Optional[str] = None,
        location: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> List[Job]:
        """
        Catalog jobs for the swipe deck, newest first.

        Every filter accepts "all" to mean no filter.

        Raises:
            ValidationError: On an unknown salary range
        """
        jobs = self.jobs.find(JobQuery(
            company=_selected(company),
            employment_type=_selected(employment_type),
            location=_selected(location),
            keyword=keyword or None,
        ))
        salary_range = _selected(salary_range)
        if salary_range:
            jobs = [job for job in jobs if in_salary_range(job.salary, salary_range)]
        return jobs

    def filter_options(self) -> Dict[str, List[str]]:
        """Distinct companies and locations, sorted."""
        jobs = self.list_jobs()
        return {
            "companies": sorted({job.company for job in jobs}),
            "locations": sorted({job.location for job in jobs}),
        }

    def search(
        self,
        company: Optional[str] = None,
        title: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> List[Job]:
        """Case-insensitive substring search; no arguments returns every job."""
        return self.jobs.find(JobQuery(
            company_contains=company or None,
            title_contains=title or None,
            keyword=keyword or None,
        ))

    def create(self, job: Job) -> Job:
        created = self.jobs.create(job)
        logger.info(f"Added catalog job {created.id}: {created.title} at {created.company}")
        return created
