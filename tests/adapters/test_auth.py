from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from catalogsync.adapters.auth import BasicCredentials, OAuthPasswordGrant
from catalogsync.domain.errors import AuthenticationError, PlatformAPIError
from tests.helpers.http import RecordingTransport, json_body

TOKEN_URL = "https://pim.example/api/oauth/v1/token"
CLIENT_BASIC = "Basic Y2xpZW50OnNlY3JldA=="


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 5, 1, 12, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def _grant(clock: FakeClock) -> OAuthPasswordGrant:
    return OAuthPasswordGrant(
        token_url=TOKEN_URL,
        client_id="client",
        client_secret="secret",
        username="importer",
        password="hunter2",
        refresh_skew=timedelta(minutes=5),
        clock=clock,
    )


def _token(value: str, *, refresh: str | None = "refresh-1") -> httpx.Response:
    payload: dict[str, object] = {"access_token": value, "expires_in": 3600}
    if refresh is not None:
        payload["refresh_token"] = refresh
    return httpx.Response(200, json=payload)


def _applied_headers(auth: httpx.Auth) -> dict[str, str]:
    request = next(auth.sync_auth_flow(httpx.Request("GET", "https://pim.example/api/rest/v1")))
    return {"Authorization": request.headers["Authorization"]}


def _headers(grant: OAuthPasswordGrant, transport: RecordingTransport) -> dict[str, str]:
    async def run() -> httpx.Auth:
        async with transport.client() as client:
            return await grant.authorize(client)

    return _applied_headers(asyncio.run(run()))


def test_basic_credentials_header() -> None:
    auth = asyncio.run(BasicCredentials("ck", "cs").authorize(None))  # type: ignore[arg-type]

    assert isinstance(auth, httpx.BasicAuth)
    headers = _applied_headers(auth)
    assert headers == {"Authorization": "Basic Y2s6Y3M="}


def test_password_grant_issues_bearer_header() -> None:
    clock = FakeClock()
    grant = _grant(clock)
    transport = RecordingTransport(lambda request: _token("token-1"))

    headers = _headers(grant, transport)

    assert headers == {"Authorization": "Bearer token-1"}
    request = transport.requests[0]
    assert request.method == "POST"
    assert request.headers["Authorization"] == CLIENT_BASIC
    assert json_body(request) == {
        "grant_type": "password",
        "username": "importer",
        "password": "hunter2",
    }
    assert grant.token is not None
    assert grant.token.expires_at == clock.now + timedelta(hours=1)


def test_valid_token_is_reused() -> None:
    clock = FakeClock()
    grant = _grant(clock)
    transport = RecordingTransport(lambda request: _token("token-1"))

    _headers(grant, transport)
    clock.advance(minutes=30)
    headers = _headers(grant, transport)

    assert headers == {"Authorization": "Bearer token-1"}
    assert len(transport.requests) == 1


def test_token_close_to_expiry_is_refreshed() -> None:
    clock = FakeClock()
    grant = _grant(clock)
    responses = iter([_token("token-1"), _token("token-2", refresh="refresh-2")])
    transport = RecordingTransport(lambda request: next(responses))

    _headers(grant, transport)
    clock.advance(minutes=56)
    headers = _headers(grant, transport)

    assert headers == {"Authorization": "Bearer token-2"}
    assert json_body(transport.requests[1]) == {
        "grant_type": "refresh_token",
        "refresh_token": "refresh-1",
    }
    assert grant.token is not None
    assert grant.token.refresh_token == "refresh-2"


def test_rejected_refresh_falls_back_to_password_grant() -> None:
    clock = FakeClock()
    grant = _grant(clock)

    def handler(request: httpx.Request) -> httpx.Response:
        body = json_body(request)
        if body["grant_type"] == "refresh_token":
            return httpx.Response(400, json={"error": "invalid_grant"})
        return _token(f"token-{len(transport.requests)}")

    transport = RecordingTransport(handler)

    _headers(grant, transport)
    clock.advance(hours=2)
    headers = _headers(grant, transport)

    assert [json_body(request)["grant_type"] for request in transport.requests] == [
        "password",
        "refresh_token",
        "password",
    ]
    assert headers == {"Authorization": "Bearer token-3"}


def test_rejected_password_grant_raises_authentication_error() -> None:
    transport = RecordingTransport(lambda request: httpx.Response(401))

    with pytest.raises(AuthenticationError):
        _headers(_grant(FakeClock()), transport)


def test_token_endpoint_failure_is_platform_error() -> None:
    transport = RecordingTransport(lambda request: httpx.Response(500))

    with pytest.raises(PlatformAPIError):
        _headers(_grant(FakeClock()), transport)


def test_malformed_token_response_is_authentication_error() -> None:
    transport = RecordingTransport(lambda request: httpx.Response(200, json={"token": "x"}))

    with pytest.raises(AuthenticationError, match="Malformed token response"):
        _headers(_grant(FakeClock()), transport)
