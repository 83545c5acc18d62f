"""Google service account authentication for the Drive API.

Implements the OAuth 2.0 JWT bearer flow: a signed RS256 assertion is
exchanged at the key's ``token_uri`` for a short-lived access token.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
import jwt

from .errors import GoogleAuthError

logger = logging.getLogger(__name__)

DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600
# Refresh this long before the token actually expires
EXPIRY_MARGIN_SECONDS = 60


@dataclass
class ServiceAccountCredentials:
    """The fields of a service account key file we need."""

    client_email: str
    private_key: str
    token_uri: str = "https://oauth2.googleapis.com/token"
    private_key_id: Optional[str] = None

    @classmethod
    def from_json(cls, text: str) -> "ServiceAccountCredentials":
        """Parse a service account key JSON document."""
        try:
            data = json.loads(text)
        except ValueError as e:
            raise GoogleAuthError(f"Service account key is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise GoogleAuthError("Service account key must be a JSON object")

        missing = [k for k in ("client_email", "private_key") if not data.get(k)]
        if missing:
            raise GoogleAuthError(f"Service account key is missing: {', '.join(missing)}")

        return cls(
            client_email=data["client_email"],
            private_key=data["private_key"],
            token_uri=data.get("token_uri") or cls.token_uri,
            private_key_id=data.get("private_key_id"),
        )


class ServiceAccountTokenProvider:
    """Mints and caches Drive access tokens for a service account."""

    def __init__(
        self,
        credentials: ServiceAccountCredentials,
        scope: str = DRIVE_READONLY_SCOPE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.scope = scope
        self._transport = transport
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    def build_assertion(self, now: Optional[int] = None) -> str:
        """Sign the JWT assertion sent to the token endpoint."""
        issued_at = int(now if now is not None else time.time())
        payload = {
            "iss": self.credentials.client_email,
            "scope": self.scope,
            "aud": self.credentials.token_uri,
            "iat": issued_at,
            "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        }
        headers = {"kid": self.credentials.private_key_id} if self.credentials.private_key_id else None
        try:
            return jwt.encode(
                payload, self.credentials.private_key, algorithm="RS256", headers=headers
            )
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise GoogleAuthError(f"Could not sign service account assertion: {e}") from e

    async def get_access_token(self) -> str:
        """Return a valid access token, fetching a new one when needed."""
        if self._token and time.time() < self._expires_at - EXPIRY_MARGIN_SECONDS:
            return self._token

        assertion = self.build_assertion()
        try:
            async with httpx.AsyncClient(timeout=30, transport=self._transport) as client:
                response = await client.post(
                    self.credentials.token_uri,
                    data={"grant_type": GRANT_TYPE, "assertion": assertion},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise GoogleAuthError(f"Google authentication failed: {e}") from e
        except ValueError as e:
            raise GoogleAuthError("Token endpoint returned invalid JSON") from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise GoogleAuthError("Token endpoint response has no access_token")

        self._token = token
        self._expires_at = time.time() + int(data.get("expires_in", ASSERTION_LIFETIME_SECONDS))
        logger.info(f"Google Drive API client authenticated as {self.credentials.client_email}")
        return token


class StaticTokenProvider:
    """Wraps an access token obtained elsewhere (e.g. workload identity)."""

    def __init__(self, token: str):
        self._token = token

    async def get_access_token(self) -> str:
        return self._token


def get_token_provider(
    service_account_key: Optional[str], access_token: Optional[str] = None
):
    """
    Pick the token provider for the configured credentials.

    Raises:
        GoogleAuthError: If neither credential is configured or the key is invalid
    """
    if access_token:
        return StaticTokenProvider(access_token)
    if not service_account_key:
        raise GoogleAuthError("Google Service Account Key JSON was not provided.")
    return ServiceAccountTokenProvider(ServiceAccountCredentials.from_json(service_account_key))
