from __future__ import annotations

import asyncio
import logging
import time
from datetime import timezone
from typing import Callable

import google.auth
from google.auth.exceptions import DefaultCredentialsError, RefreshError
from google.auth.transport.requests import Request as GoogleAuthRequest

from career_pulse.ai.types import AccessToken, CredentialProvider
from career_pulse.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
TOKEN_TTL_S = 55 * 60
EXPIRY_SKEW_S = 5 * 60


class GoogleCredentialProvider:
    """Application Default Credentials (service account file or gcloud login)."""

    def __init__(self, scopes: list[str] | None = None):
        self._scopes = scopes or SCOPES
        self._credentials = None

    def get_access_token(self) -> AccessToken:
        try:
            if self._credentials is None:
                self._credentials, _ = google.auth.default(scopes=self._scopes)
            self._credentials.refresh(GoogleAuthRequest())
        except ValueError as exc:
            raise AuthenticationError(
                "Credential file is not valid JSON. Ensure GOOGLE_APPLICATION_CREDENTIALS points to a "
                "service account key that contains client_email and private_key."
            ) from exc
        except FileNotFoundError as exc:
            raise AuthenticationError(
                "Credentials file not found at path in GOOGLE_APPLICATION_CREDENTIALS."
            ) from exc
        except (DefaultCredentialsError, RefreshError) as exc:
            raise AuthenticationError(f"Could not obtain Google Cloud credentials: {exc}") from exc

        expiry = getattr(self._credentials, "expiry", None)
        expires_at = None
        if expiry is not None:
            # google-auth reports naive UTC datetimes
            expires_at = expiry.replace(tzinfo=timezone.utc).timestamp()
        return AccessToken(token=self._credentials.token, expires_at=expires_at)


class CredentialCache:
    def __init__(
        self,
        provider: CredentialProvider,
        *,
        ttl_s: float = TOKEN_TTL_S,
        skew_s: float = EXPIRY_SKEW_S,
        clock: Callable[[], float] = time.time,
    ):
        self._provider = provider
        self._ttl_s = ttl_s
        self._skew_s = skew_s
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float | None = None

    @property
    def expires_at(self) -> float | None:
        return self._expires_at

    def is_valid(self) -> bool:
        return (
            self._token is not None
            and self._expires_at is not None
            and self._clock() < self._expires_at
        )

    async def get(self) -> str:
        if self.is_valid():
            return self._token  # type: ignore[return-value]

        try:
            fresh = await asyncio.to_thread(self._provider.get_access_token)
        except AuthenticationError:
            raise
        except Exception as exc:
            logger.error("access_token_fetch_failed: %s", exc)
            raise AuthenticationError(f"Could not obtain access token: {exc}") from exc

        fetched_at = self._clock()
        expires_at = fetched_at + self._ttl_s
        if fresh.expires_at is not None:
            expires_at = min(expires_at, fresh.expires_at - self._skew_s)
        self._token = fresh.token
        self._expires_at = expires_at
        return fresh.token

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = None
