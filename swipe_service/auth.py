"""
Authentication Module

Optional shared-secret protection for /api routes. When SWIPE_API_SECRET is
unset every request passes; when set, requests must carry it as a bearer
token.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import get_settings

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> Optional[HTTPAuthorizationCredentials]:
    """
    Verify shared secret token.

    Raises:
        HTTPException: 401 if a secret is configured and the token is missing or wrong
    """
    settings = get_settings()
    if not settings.auth_required:
        return credentials

    if credentials is None or credentials.credentials != settings.swipe_api_secret:
        logger.warning("Rejected request with invalid API token")
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token"
        )

    return credentials
