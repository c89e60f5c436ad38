"""Credential handling for platform APIs: HTTP Basic and OAuth2 password grant."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from catalogsync.domain.errors import (
    AuthenticationError,
    PlatformAPIError,
    TransientNetworkError,
)

if TYPE_CHECKING:
    from collections.abc import Generator

    from catalogsync.adapters.http_resilience import ResilientClient

log = getLogger(__name__)

DEFAULT_REFRESH_SKEW = timedelta(minutes=5)
_REJECTED_STATUSES = frozenset({400, 401, 403, 422})


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RequestAuth(Protocol):
    """Produces the httpx auth for the next request."""

    async def authorize(self, client: ResilientClient) -> httpx.Auth: ...


class BearerAuth(httpx.Auth):
    def __init__(self, token: str) -> None:
        self.token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


@dataclass(frozen=True, slots=True)
class BasicCredentials:
    """Long-lived key pair sent with every request."""

    username: str
    password: str

    async def authorize(self, client: ResilientClient) -> httpx.Auth:
        del client
        return httpx.BasicAuth(self.username, self.password)


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: int = 3600
    refresh_token: str | None = None
    token_type: str | None = None


@dataclass(frozen=True, slots=True)
class AccessToken:
    value: str
    expires_at: datetime
    refresh_token: str | None = None

    def expires_within(self, window: timedelta, *, now: datetime) -> bool:
        return self.expires_at - window <= now


@dataclass(slots=True)
class OAuthPasswordGrant:
    """OAuth2 password grant with refresh tokens.

    The token is checked before each request and refreshed once it is within
    ``refresh_skew`` of expiry. A rejected refresh falls back to a fresh password
    grant; a rejected password grant raises :class:`AuthenticationError`.
    """

    token_url: str
    client_id: str
    client_secret: str
    username: str
    password: str
    refresh_skew: timedelta = DEFAULT_REFRESH_SKEW
    clock: Callable[[], datetime] = _utcnow
    _token: AccessToken | None = field(default=None, init=False)

    @property
    def token(self) -> AccessToken | None:
        return self._token

    async def authorize(self, client: ResilientClient) -> httpx.Auth:
        token = await self.ensure_valid_token(client)
        return BearerAuth(token.value)

    async def ensure_valid_token(self, client: ResilientClient) -> AccessToken:
        token = self._token
        if token is None:
            token = await self._password_grant(client)
        elif token.expires_within(self.refresh_skew, now=self.clock()):
            token = await self._refresh(client, token)
        self._token = token
        return token

    async def _password_grant(self, client: ResilientClient) -> AccessToken:
        log.info("Requesting access token from %s", self.token_url)
        return await self._request_token(
            client,
            {"grant_type": "password", "username": self.username, "password": self.password},
        )

    async def _refresh(self, client: ResilientClient, token: AccessToken) -> AccessToken:
        if token.refresh_token is None:
            return await self._password_grant(client)
        try:
            return await self._request_token(
                client,
                {"grant_type": "refresh_token", "refresh_token": token.refresh_token},
            )
        except AuthenticationError as exc:
            log.info("Token refresh rejected (%s); re-authenticating", exc)
            return await self._password_grant(client)

    async def _request_token(
        self, client: ResilientClient, body: dict[str, str]
    ) -> AccessToken:
        try:
            response = await client.post(
                self.token_url,
                json=body,
                auth=httpx.BasicAuth(self.client_id, self.client_secret),
            )
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"Token request failed: {exc}") from exc

        if response.status_code in _REJECTED_STATUSES:
            raise AuthenticationError(
                f"Token request rejected with status {response.status_code}"
            )
        if response.is_error:
            raise PlatformAPIError(
                f"Token endpoint returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthenticationError(f"Malformed token response: {exc}") from exc

        return AccessToken(
            value=payload.access_token,
            expires_at=self.clock() + timedelta(seconds=payload.expires_in),
            refresh_token=payload.refresh_token or body.get("refresh_token"),
        )
