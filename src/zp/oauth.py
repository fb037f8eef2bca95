"""OAuth credentials and the token suppliers the request layer depends on.

The request and pagination code only ever call ``access_token()``. Whether
that hits a cached token, a refresh-token grant or an interactive browser
login is decided here.
"""

from __future__ import annotations

import logging
import secrets
import webbrowser
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import TYPE_CHECKING, Callable, Protocol
from urllib.parse import parse_qs, urlencode, urlparse

import httpx
from pydantic import ValidationError

from .errors import RefreshFailure
from .models import TokenResponse

if TYPE_CHECKING:
    from .storage import TokenStore

logger = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://accounts.zoho.com/oauth/v2/auth"
DEFAULT_TOKEN_URL = "https://accounts.zoho.com/oauth/v2/token"
DEFAULT_REDIRECT_URI = "http://localhost:8080/"
DEFAULT_SCOPES = (
    "ZohoProjects.portals.READ",
    "ZohoProjects.projects.ALL",
    "ZohoProjects.tasks.ALL",
    "ZohoProjects.tasklists.ALL",
    "ZohoProjects.bugs.ALL",
    "ZohoProjects.milestones.ALL",
    "ZohoProjects.users.READ",
)
SUCCESS_MESSAGE = "Authenticated successfully. You can now close this tab."


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenSupplier(Protocol):
    def access_token(self) -> str: ...


class StaticToken:
    """A token obtained elsewhere; never refreshed."""

    def __init__(self, token: str) -> None:
        self.token = token

    def access_token(self) -> str:
        return self.token


@dataclass
class Credentials:
    client_id: str
    client_secret: str
    auth_url: str = DEFAULT_AUTH_URL
    token_url: str = DEFAULT_TOKEN_URL
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: tuple[str, ...] = DEFAULT_SCOPES
    token: str | None = field(default=None, repr=False)
    expires_at: datetime | None = None
    refresh_token: str | None = field(default=None, repr=False)

    def expired(self, now: datetime) -> bool:
        if self.token is None:
            return True
        # no known expiry: keep using the token until the server rejects it
        if self.expires_at is None:
            return False
        return self.expires_at <= now


@dataclass
class AuthorizationCallback:
    code: str
    state: str | None


Authorizer = Callable[[str], AuthorizationCallback]


class _CallbackHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:  # noqa: N802 - http.server naming
        self.server.callback_query = parse_qs(urlparse(self.path).query)  # type: ignore[attr-defined]
        body = SUCCESS_MESSAGE.encode()
        self.send_response(200)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("callback: " + format, *args)


class LocalRedirectAuthorizer:
    """Sends the user to the consent page and waits for a single redirect.

    Blocks until the browser hits the redirect URI. There is no timeout and
    only the first request is looked at.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8080, open_browser: bool = True) -> None:
        self.host = host
        self.port = port
        self.open_browser = open_browser

    def __call__(self, authorize_url: str) -> AuthorizationCallback:
        if not self.open_browser or not webbrowser.open(authorize_url):
            logger.warning("Open this URL in your browser:\n%s", authorize_url)

        try:
            server = HTTPServer((self.host, self.port), _CallbackHandler)
        except OSError as exc:
            raise RefreshFailure(f"Cannot listen on {self.host}:{self.port}: {exc}") from exc
        server.callback_query = {}  # type: ignore[attr-defined]
        with server:
            server.handle_request()
        query: dict[str, list[str]] = server.callback_query  # type: ignore[attr-defined]

        if "error" in query:
            raise RefreshFailure(f"Authorization was denied: {query['error'][0]}")
        if "code" not in query:
            raise RefreshFailure("Redirect did not carry an authorization code")
        state = query.get("state", [None])[0]
        return AuthorizationCallback(code=query["code"][0], state=state)


class OAuthTokenProvider:
    def __init__(
        self,
        credentials: Credentials,
        http: httpx.Client | None = None,
        authorizer: Authorizer | None = None,
        clock: Callable[[], datetime] = utcnow,
        store: TokenStore | None = None,
    ) -> None:
        self.credentials = credentials
        self._owns_http = http is None
        self.http = http if http is not None else httpx.Client(timeout=30.0)
        self.authorizer = authorizer if authorizer is not None else LocalRedirectAuthorizer()
        self.clock = clock
        self.store = store
        if store is not None:
            store.load(credentials)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> OAuthTokenProvider:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def access_token(self) -> str:
        token = self.credentials.token
        if token is None or self.credentials.expired(self.clock()):
            return self.refresh()
        return token

    def authorize_url(self, state: str) -> str:
        query = {
            "scope": ",".join(self.credentials.scopes),
            "client_id": self.credentials.client_id,
            "response_type": "code",
            "access_type": "offline",
            "redirect_uri": self.credentials.redirect_uri,
            "state": state,
        }
        return f"{self.credentials.auth_url}?{urlencode(query)}"

    def refresh(self) -> str:
        if self.credentials.refresh_token:
            logger.info("Refreshing Zoho access token")
            response = self._exchange(
                {
                    "grant_type": "refresh_token",
                    "refresh_token": self.credentials.refresh_token,
                }
            )
        else:
            logger.info("No Zoho refresh token held; starting browser authorization")
            response = self._exchange(
                {
                    "grant_type": "authorization_code",
                    "code": self._authorize(),
                    "redirect_uri": self.credentials.redirect_uri,
                }
            )
        return self._apply(response)

    def _authorize(self) -> str:
        state = secrets.token_urlsafe(16)
        callback = self.authorizer(self.authorize_url(state))
        if callback.state != state:
            raise RefreshFailure("OAuth state returned by the redirect does not match the request")
        return callback.code

    def _exchange(self, grant: dict[str, str]) -> TokenResponse:
        params = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            **grant,
        }
        try:
            response = self.http.post(self.credentials.token_url, params=params)
        except httpx.RequestError as exc:
            raise RefreshFailure(f"Token request failed: {exc}") from exc
        if not response.is_success:
            raise RefreshFailure(f"Token endpoint returned {response.status_code}")
        try:
            token = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RefreshFailure("Token endpoint returned an unreadable body") from exc
        if token.error:
            raise RefreshFailure(f"Token endpoint rejected the grant: {token.error}")
        if not token.access_token:
            raise RefreshFailure("Token endpoint returned no access token")
        return token

    def _apply(self, token: TokenResponse) -> str:
        access_token = token.access_token
        self.credentials.token = access_token
        self.credentials.expires_at = self.clock() + timedelta(seconds=token.lifetime_seconds())
        if token.refresh_token:
            self.credentials.refresh_token = token.refresh_token
        if self.store is not None:
            self.store.save(self.credentials)
        return access_token
