"""
Swipe service route modules.

Each module handles one area of functionality.
"""

from .applications import router as applications_router
from .compatibility import router as compatibility_router
from .jobs import router as jobs_router
from .oauth import router as oauth_router
from .resumes import router as resumes_router
from .swipes import router as swipes_router
from .vacancies import router as vacancies_router

__all__ = [
    "applications_router",
    "compatibility_router",
    "jobs_router",
    "oauth_router",
    "resumes_router",
    "swipes_router",
    "vacancies_router",
]
