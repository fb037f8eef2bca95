from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from zp.errors import RefreshFailure
from zp.oauth import AuthorizationCallback, Credentials, OAuthTokenProvider
from zp.storage import TokenStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TokenEndpoint:
    def __init__(self, body: dict, status: int = 200):
        self.body = body
        self.status = status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


def _refuse(url: str) -> AuthorizationCallback:
    raise AssertionError("browser authorization should not run")


def _provider(endpoint: TokenEndpoint, credentials: Credentials, authorizer=_refuse, **kwargs) -> OAuthTokenProvider:
    return OAuthTokenProvider(credentials, http=endpoint.client(), authorizer=authorizer, clock=lambda: NOW, **kwargs)


def test_unexpired_token_is_reused_without_io():
    endpoint = TokenEndpoint({"access_token": "never"})
    credentials = Credentials("id", "secret", token="live", expires_at=NOW + timedelta(minutes=5))
    provider = _provider(endpoint, credentials)

    assert provider.access_token() == "live"
    assert provider.access_token() == "live"
    assert endpoint.requests == []


def test_token_expiring_now_counts_as_expired():
    credentials = Credentials("id", "secret", token="old", expires_at=NOW)

    assert credentials.expired(NOW)
    assert not credentials.expired(NOW - timedelta(seconds=1))


def test_refresh_grant_keeps_refresh_token():
    endpoint = TokenEndpoint({"access_token": "fresh", "expires_in": 3600, "api_domain": "https://www.zohoapis.com"})
    credentials = Credentials("id", "secret", token="old", expires_at=NOW, refresh_token="r-1")
    provider = _provider(endpoint, credentials)

    assert provider.access_token() == "fresh"
    params = endpoint.requests[0].url.params
    assert params["grant_type"] == "refresh_token"
    assert params["refresh_token"] == "r-1"
    assert params["client_id"] == "id"
    assert credentials.refresh_token == "r-1"
    assert credentials.expires_at == NOW + timedelta(hours=1)


def test_authorization_code_flow():
    endpoint = TokenEndpoint({"access_token": "new", "refresh_token": "r-2", "expires_in_sec": 1800})
    seen_urls: list[str] = []

    def authorizer(url: str) -> AuthorizationCallback:
        seen_urls.append(url)
        state = parse_qs(urlparse(url).query)["state"][0]
        return AuthorizationCallback(code="grant-code", state=state)

    credentials = Credentials("id", "secret")
    provider = _provider(endpoint, credentials, authorizer=authorizer)

    assert provider.access_token() == "new"
    query = parse_qs(urlparse(seen_urls[0]).query)
    assert seen_urls[0].startswith("https://accounts.zoho.com/oauth/v2/auth?")
    assert query["redirect_uri"] == ["http://localhost:8080/"]
    assert query["access_type"] == ["offline"]
    params = endpoint.requests[0].url.params
    assert params["grant_type"] == "authorization_code"
    assert params["code"] == "grant-code"
    assert credentials.refresh_token == "r-2"
    assert credentials.expires_at == NOW + timedelta(minutes=30)


def test_state_mismatch_is_refresh_failure():
    endpoint = TokenEndpoint({"access_token": "new"})
    provider = _provider(
        endpoint,
        Credentials("id", "secret"),
        authorizer=lambda url: AuthorizationCallback(code="c", state="forged"),
    )

    with pytest.raises(RefreshFailure):
        provider.access_token()
    assert endpoint.requests == []


@pytest.mark.parametrize(
    "body, status",
    [
        ({"error": "invalid_code"}, 200),
        ({"token_type": "Bearer"}, 200),
        ({"error": "server"}, 500),
    ],
)
def test_rejected_exchange_is_refresh_failure(body, status):
    endpoint = TokenEndpoint(body, status=status)
    credentials = Credentials("id", "secret", refresh_token="r-1")

    with pytest.raises(RefreshFailure):
        _provider(endpoint, credentials).access_token()
    assert credentials.token is None


def test_tokens_persist_between_providers(tmp_path: Path):
    store = TokenStore(tmp_path / "tokens.json")
    endpoint = TokenEndpoint({"access_token": "fresh", "refresh_token": "r-9", "expires_in": 3600})
    _provider(endpoint, Credentials("id", "secret", refresh_token="r-1"), store=store).access_token()

    reloaded = Credentials("id", "secret")
    provider = _provider(TokenEndpoint({}), reloaded, store=store)

    assert provider.access_token() == "fresh"
    assert reloaded.refresh_token == "r-9"


def test_token_without_known_expiry_is_used_until_rejected():
    endpoint = TokenEndpoint({"access_token": "never"})
    credentials = Credentials("id", "secret", token="known-good")
    provider = _provider(endpoint, credentials)

    assert not credentials.expired(NOW)
    assert provider.access_token() == "known-good"
    assert endpoint.requests == []


def test_missing_token_is_fetched_and_returned():
    endpoint = TokenEndpoint({"access_token": "first", "expires_in_sec": 60})
    credentials = Credentials("id", "secret", refresh_token="r-1")
    provider = _provider(endpoint, credentials)

    assert provider.refresh() == "first"
    assert credentials.expires_at == NOW + timedelta(seconds=60)


def test_provider_closes_only_the_client_it_created():
    owned = OAuthTokenProvider(Credentials("id", "secret"), authorizer=_refuse)
    with owned:
        pass
    assert owned.http.is_closed

    endpoint = TokenEndpoint({})
    shared = endpoint.client()
    OAuthTokenProvider(Credentials("id", "secret"), http=shared, authorizer=_refuse).close()
    assert not shared.is_closed
