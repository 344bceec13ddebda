"""
app/connectors/supabase_auth.py

Client for the hosted auth provider's user endpoint.

Resolves a bearer access token to the signed-in user. Requests are made
once; failures surface to the caller without retry.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import AuthSettings
from app.domain.sales import AuthenticatedUser

logger = logging.getLogger(__name__)

_USER_PATH = "/auth/v1/user"
_REJECTED_STATUS_CODES = {401, 403}


class AuthenticationError(RuntimeError):
    """
    Raised when the access token is missing, expired or rejected.
    """


class AuthProviderError(RuntimeError):
    """
    Raised when the auth provider cannot be reached or answers unexpectedly.
    """


class SupabaseAuthClient:
    """
    Resolves access tokens against ``GET {SUPABASE_URL}/auth/v1/user``.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        session: requests.Session | None = None,
    ) -> None:
        if not settings.supabase_url or not settings.anon_key:
            raise AuthProviderError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured.")
        self._user_url = f"{settings.supabase_url.rstrip('/')}{_USER_PATH}"
        self._anon_key = settings.anon_key
        self._timeout_seconds = settings.timeout_seconds
        self._session = session or requests.Session()

    def get_user(self, access_token: str) -> AuthenticatedUser:
        token = access_token.strip()
        if not token:
            raise AuthenticationError("Missing access token.")

        try:
            response = self._session.get(
                self._user_url,
                headers={
                    "apikey": self._anon_key,
                    "Authorization": f"Bearer {token}",
                },
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Auth provider request failed url=%s error=%s", self._user_url, exc)
            raise AuthProviderError("Auth provider is unreachable.") from exc

        if response.status_code in _REJECTED_STATUS_CODES:
            raise AuthenticationError("Invalid or expired access token.")
        if response.status_code >= 400:
            logger.error(
                "Auth provider returned status=%s url=%s",
                response.status_code,
                self._user_url,
            )
            raise AuthProviderError(f"Auth provider returned HTTP {response.status_code}.")

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise AuthProviderError("Auth provider response was not valid JSON.") from exc

        if not isinstance(payload, dict) or not payload.get("id"):
            raise AuthProviderError("Auth provider response did not include a user id.")

        email = payload.get("email")
        return AuthenticatedUser(
            id=str(payload["id"]),
            email=str(email) if email else None,
        )
