"""
Error types for JobSwipe.

Synchronous-phase errors are raised to the caller and mapped to HTTP status
codes by swipe_service. Background-phase errors never leave the pipeline; they
are written to the Application record instead.
"""

from typing import Any, Dict, List, Optional


class JobSwipeError(Exception):
    """Base class for all JobSwipe errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(JobSwipeError):
    """Input rejected before any persistence (missing vacancy id, bad filter)."""

    status_code = 400


class NotFoundError(JobSwipeError):
    """Requested record does not exist."""

    status_code = 404


class NoResumeSelectedError(JobSwipeError):
    """User has no selected resume (or it has no content)."""

    status_code = 400


class NotAuthenticatedError(JobSwipeError):
    """No valid hh.ru access token for the user."""

    status_code = 401


class DatabaseUnavailableError(JobSwipeError):
    """MongoDB is not configured or failed the readiness check."""

    status_code = 503


class HHApiError(JobSwipeError):
    """
    hh.ru API call failed.

    Attributes:
        http_status: HTTP status code, None for network-level failures
        errors: Field-level sub-errors reported by hh.ru
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.http_status = http_status
        self.errors = errors or []
