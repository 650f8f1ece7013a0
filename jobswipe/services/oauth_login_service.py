"""
OAuth Login Service

Completes the hh.ru authorization-code flow: exchanges the code, looks up
the hh.ru account, creates or updates the local user and syncs resumes.
Resume sync failure does not fail the login.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from jobswipe.common.errors import ValidationError
from jobswipe.common.models import User
from jobswipe.common.repositories import UserRepositoryInterface
from jobswipe.services.hh_auth import HHOAuthClient, TokenManager, expires_at_from
from jobswipe.services.hh_client import HHClient
from jobswipe.services.resume_sync_service import ResumeSyncService

logger = logging.getLogger(__name__)


class OAuthLoginService:

    def __init__(
        self,
        oauth: HHOAuthClient,
        hh_client: HHClient,
        users: UserRepositoryInterface,
        resume_sync: ResumeSyncService,
        token_manager: TokenManager,
    ):
        self.oauth = oauth
        self.hh_client = hh_client
        self.users = users
        self.resume_sync = resume_sync
        self.token_manager = token_manager

    def authorize_url(self) -> str:
        return self.oauth.authorize_url()

    async def complete_login(self, code: Optional[str]) -> User:
        """
        Handle the OAuth callback.

        Raises:
            ValidationError: If code is missing
            HHApiError: If the token exchange or /me lookup fails
        """
        if not code:
            raise ValidationError("Missing authorization code")

        tokens = await self.oauth.exchange_code(code)
        logger.info(f"Tokens received, expires_in: {tokens.expires_in}")

        info = await self.hh_client.get_user_info(tokens.access_token)
        user = await asyncio.to_thread(
            self.users.upsert_from_oauth,
            hh_user_id=str(info["id"]),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=expires_at_from(tokens.expires_in),
            email=info.get("email"),
            first_name=info.get("first_name"),
            last_name=info.get("last_name"),
        )
        logger.info(f"User authenticated: {user.id}")

        try:
            await self.resume_sync.sync(user.id, tokens.access_token)
        except Exception as e:
            logger.error(f"Resume sync failed (non-fatal) for user {user.id}: {e}")

        return user

    async def auth_status(self, user_id: Optional[str]) -> Dict[str, Any]:
        if not user_id:
            return {"authenticated": False}

        user = await asyncio.to_thread(self.users.get, user_id)
        if user is None or not user.hh_access_token:
            return {"authenticated": False}

        access_token = await self.token_manager.get_valid_access_token(user_id)
        return {"authenticated": bool(access_token), "user": user.to_public_dict()}
