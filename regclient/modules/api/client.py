"""
Registry client session.

Client owns the HTTP transport and the cached bearer token, and provides
the one request primitive everything else is built on:

    async with Client.configure(registry="quay.io").build() as client:
        resp = await client.execute("GET", "/v2/coreos/etcd/tags/list")

execute() follows the registry auth flow: a 401 carrying a Bearer
challenge triggers one token exchange and exactly one retry.
"""

import asyncio
from typing import Optional, Sequence
from urllib.parse import urlsplit

import httpx
import structlog

from regclient.config import load_config
from regclient.errors import AuthChallengeUnparsable, ChallengeParseError
from regclient.modules.auth import Token, fetch_token, parse_challenge
from .response import check_response

logger = structlog.stdlib.get_logger(__name__)

API_VERSION_HEADER = "Docker-Distribution-API-Version"
API_VERSION = "registry/2.0"


class Client:
    """
    A session against one registry.

    Usage:
        client = Client("https://registry-1.docker.io", credentials=("user", "pass"))
        resp = await client.execute("GET", "/v2/library/nginx/manifests/latest")
        # ... do work ...
        await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        index: Optional[str] = None,
        credentials: Optional[tuple] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            base_url: Registry base URL (e.g., "https://registry-1.docker.io")
            index: Hostname sent in the Host header, defaults to the base URL's host
            credentials: Optional (username, password) for the token service
            user_agent: Optional User-Agent header value
            transport: Optional pre-built httpx.AsyncClient; the client will not close it
            timeout: Request timeout in seconds for the transport this client creates
        """
        self.base_url = base_url.rstrip("/")
        self.index = index or urlsplit(self.base_url).netloc
        self.credentials = credentials
        self.user_agent = user_agent
        self._token: Optional[Token] = None
        self._refresh_lock = asyncio.Lock()

        self._owns_transport = transport is None
        if transport is None:
            transport = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self.transport = transport

    @staticmethod
    def configure(**overrides):
        """Start building a client from the environment plus overrides."""
        return load_config(**overrides)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    # =========================================================================
    # Token state
    # =========================================================================

    @property
    def token(self) -> Optional[Token]:
        """The cached bearer token, or None when absent or expired."""
        if self._token is not None and self._token.expired:
            logger.debug("Cached token expired", registry=self.index)
            self._token = None
        return self._token

    def invalidate(self) -> None:
        """Drop the cached token so the next request starts anonymous."""
        self._token = None

    async def _refresh_token(self, challenge, scopes: Optional[Sequence[str]] = None) -> Token:
        async with self._refresh_lock:
            self._token = None
            token = await fetch_token(
                self.transport,
                challenge,
                credentials=self.credentials,
                scopes=scopes,
                user_agent=self.user_agent,
            )
            self._token = token
            return token

    # =========================================================================
    # Requests
    # =========================================================================

    def url_for(self, path: str) -> str:
        """Resolve a registry path (or pass through an absolute URL)."""
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.base_url + path

    def _headers(self, url: str, extra: Optional[dict] = None) -> dict:
        headers = {}
        # The index Host and the bearer token belong to the registry only.
        if url.startswith(self.base_url + "/"):
            headers["Host"] = self.index
            token = self.token
            if token is not None:
                headers["Authorization"] = f"Bearer {token.token}"
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if extra:
            headers.update(extra)
        return headers

    async def _send(self, method, url, headers=None, params=None, content=None) -> httpx.Response:
        resp = await self.transport.request(
            method,
            url,
            headers=self._headers(url, headers),
            params=params,
            content=content,
        )
        logger.debug("Registry response", method=method, url=url, status_code=resp.status_code)
        return resp

    async def execute(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[dict] = None,
        params=None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Issue a request, authenticating and retrying once on a Bearer 401.

        Args:
            method: HTTP method ("GET", "HEAD", etc.)
            path: Registry path ("/v2/...") or absolute URL
            headers: Extra request headers
            params: Query parameters
            content: Optional request body

        Returns:
            httpx.Response of the first attempt, or of the single retry

        Raises:
            AuthenticationDenied: token endpoint refused the credentials
            ProtocolViolation: token endpoint answered without a token
            httpx.TransportError: propagated unchanged
        """
        url = self.url_for(path)
        resp = await self._send(method, url, headers, params, content)
        if resp.status_code != 401:
            return resp

        header = resp.headers.get("WWW-Authenticate")
        if header is None:
            logger.warning("401 without WWW-Authenticate, not retrying", url=url)
            return resp
        try:
            challenge = parse_challenge(header)
        except ChallengeParseError as e:
            logger.warning("Unparsable auth challenge, not retrying", url=url, error=str(e))
            return resp

        await self._refresh_token(challenge)
        return await self._send(method, url, headers, params, content)

    async def login(self, scopes: Sequence[str]) -> Optional[Token]:
        """
        Authenticate up front for a set of scopes.

        Requests /v2/ for a challenge and exchanges it for a token scoped to
        ``scopes`` (e.g. ["repository:library/busybox:pull"]).

        Returns:
            The new Token, or None when the registry does not require auth

        Raises:
            AuthChallengeUnparsable: 401 without a usable Bearer challenge
            UnexpectedStatus: /v2/ answered with an error status
        """
        url = self.url_for("/v2/")
        resp = await self._send("GET", url)
        if resp.status_code != 401:
            check_response(resp)
            logger.info("Registry allows anonymous access", registry=self.index)
            return None

        try:
            challenge = parse_challenge(resp.headers.get("WWW-Authenticate"))
        except ChallengeParseError as e:
            raise AuthChallengeUnparsable(401, url=url) from e

        token = await self._refresh_token(challenge, scopes=scopes)
        logger.info("Logged in to registry", registry=self.index, scopes=list(scopes))
        return token

    async def is_v2_supported(self) -> bool:
        """
        Check whether the registry speaks Docker Registry API v2.

        A 401 counts: registries that require auth challenge even /v2/.
        """
        url = self.url_for("/v2/")
        resp = await self._send("GET", url)
        version = resp.headers.get(API_VERSION_HEADER)
        supported = resp.status_code in (200, 401) and version == API_VERSION
        if not supported:
            logger.debug(
                "v2 API not detected",
                registry=self.index,
                status_code=resp.status_code,
                api_version=version,
            )
        return supported
