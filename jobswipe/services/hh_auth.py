"""
hh.ru OAuth and access-token management.

HHOAuthClient talks to https://hh.ru/oauth (authorization-code and
refresh-token grants). TokenManager hands out a currently valid access token
per user, refreshing and persisting it when the stored one has expired.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Dict, Optional
from urllib.parse import urlencode

import httpx

from jobswipe.common.config import Config
from jobswipe.common.errors import HHApiError
from jobswipe.common.models import TokenPair, User, as_utc, utc_now
from jobswipe.common.repositories import UserRepositoryInterface

logger = logging.getLogger(__name__)


class HHOAuthClient:
    """
    OAuth 2.0 client for hh.ru.

    Usage:
        oauth = HHOAuthClient(http)
        redirect_to = oauth.authorize_url()
        tokens = await oauth.exchange_code(code)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        oauth_url: Optional[str] = None,
    ):
        self.http = http
        self.client_id = client_id if client_id is not None else Config.HH_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else Config.HH_CLIENT_SECRET
        self.redirect_uri = redirect_uri or Config.HH_REDIRECT_URI
        self.oauth_url = (oauth_url or Config.HH_OAUTH_URL).rstrip("/")

    def authorize_url(self) -> str:
        query = urlencode({
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        })
        return f"{self.oauth_url}/authorize?{query}"

    async def exchange_code(self, code: str) -> TokenPair:
        """
        Exchange an authorization code for a token pair.

        Raises:
            HHApiError: If hh.ru rejects the grant or is unreachable
        """
        return await self._token_request({
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
        })

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Trade a refresh token for a new token pair.

        Raises:
            HHApiError: If hh.ru rejects the grant or is unreachable
        """
        return await self._token_request({
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
        })

    async def _token_request(self, form: Dict[str, str]) -> TokenPair:
        grant = form["grant_type"]
        try:
            response = await self.http.post(
                f"{self.oauth_url}/token",
                data=form,
                timeout=Config.HH_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as e:
            raise HHApiError(f"Token request ({grant}) failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Token request ({grant}) failed: {response.status_code} {response.text[:300]}")
            raise HHApiError(
                f"Token request ({grant}) failed: {response.status_code}",
                http_status=response.status_code,
            )

        data = response.json()
        return TokenPair(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_in=int(data.get("expires_in", 0)),
            token_type=data.get("token_type", "bearer"),
        )


def expires_at_from(expires_in: int, now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) + timedelta(seconds=expires_in)


class TokenManager:
    """
    Produces a currently valid hh.ru access token for a user.

    Refreshes for the same user are serialized: a second caller waiting on the
    lock re-reads the user and reuses the token the first caller stored. A
    user's lock exists only while some caller holds or waits on it.
    """

    def __init__(
        self,
        users: UserRepositoryInterface,
        oauth: HHOAuthClient,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.users = users
        self.oauth = oauth
        self._clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def _is_fresh(self, user: User) -> bool:
        expires_at = user.hh_token_expires_at
        return expires_at is not None and as_utc(expires_at) > self._clock()

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]

    async def get_valid_access_token(self, user_id: str) -> Optional[str]:
        """
        Return a valid access token, refreshing it if expired.

        Returns:
            Access token, or None if the user has no tokens or refresh failed
        """
        user = await asyncio.to_thread(self.users.get, user_id)
        if user is None or not user.has_tokens:
            return None
        if self._is_fresh(user):
            return user.hh_access_token

        async with self._user_lock(user_id):
            user = await asyncio.to_thread(self.users.get, user_id)
            if user is None or not user.has_tokens:
                return None
            if self._is_fresh(user):
                return user.hh_access_token

            try:
                tokens = await self.oauth.refresh(user.hh_refresh_token)
                await asyncio.to_thread(
                    self.users.update_tokens,
                    user_id,
                    access_token=tokens.access_token,
                    refresh_token=tokens.refresh_token,
                    expires_at=expires_at_from(tokens.expires_in, self._clock()),
                )
            except Exception as e:
                logger.error(f"Failed to refresh hh.ru token for user {user_id}: {e}")
                return None

            logger.info(f"Refreshed hh.ru token for user {user_id}")
            return tokens.access_token
