"""
Bearer token exchange against a registry's token service.

The registry answers an anonymous or expired request with 401 and a
WWW-Authenticate challenge naming a realm (the token endpoint), a service
and a scope. fetch_token() trades that challenge, plus optional basic
credentials, for a bearer token. Caching the token is the caller's job.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

import httpx
import structlog

from regclient.errors import AuthenticationDenied, ProtocolViolation
from .challenge import AuthChallenge

logger = structlog.stdlib.get_logger(__name__)

# Issuers disagree on the field name; Docker Hub sends both.
TOKEN_FIELDS = ("token", "access_token")


@dataclass(frozen=True)
class Token:
    token: str
    expires_in: Optional[int] = None
    issued_at: float = field(default_factory=time.time)

    @property
    def expired(self) -> bool:
        """True once the issuer's expiry hint has elapsed."""
        if self.expires_in is None:
            return False
        return time.time() >= self.issued_at + self.expires_in

    def __repr__(self) -> str:
        return f"Token(expires_in={self.expires_in!r}, issued_at={self.issued_at!r})"


def _extract_token(body: bytes) -> Token:
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise ProtocolViolation(f"Token endpoint returned a non-JSON body: {e}") from e
    if not isinstance(payload, dict):
        raise ProtocolViolation("Token endpoint returned JSON that is not an object")

    value = None
    for name in TOKEN_FIELDS:
        candidate = payload.get(name)
        if isinstance(candidate, str) and candidate:
            value = candidate
            break
    if value is None:
        raise ProtocolViolation("Token endpoint returned no token")

    expires_in = payload.get("expires_in")
    if not isinstance(expires_in, int) or isinstance(expires_in, bool) or expires_in <= 0:
        expires_in = None

    return Token(token=value, expires_in=expires_in)


async def fetch_token(
    transport: httpx.AsyncClient,
    challenge: AuthChallenge,
    credentials: Optional[tuple] = None,
    scopes: Optional[Sequence[str]] = None,
    user_agent: Optional[str] = None,
) -> Token:
    """
    Request a bearer token from the challenge's realm.

    Args:
        transport: HTTP client used for the token request
        challenge: Parsed Bearer challenge
        credentials: Optional (username, password), sent as basic auth on
            this request only
        scopes: Explicit scopes, overriding the challenge's own scope
        user_agent: Optional User-Agent header value

    Returns:
        Token

    Raises:
        AuthenticationDenied: token endpoint answered with a non-2xx status
        ProtocolViolation: 2xx body without a usable token field
        httpx.TransportError: propagated unchanged
    """
    params = [("service", challenge.service)]
    if scopes:
        params.extend(("scope", scope) for scope in scopes)
    elif challenge.scope:
        params.append(("scope", challenge.scope))

    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    logger.debug(
        "Requesting bearer token",
        realm=challenge.realm,
        service=challenge.service,
        scopes=[value for key, value in params if key == "scope"],
        authenticated=credentials is not None,
    )

    resp = await transport.get(
        challenge.realm,
        params=params,
        headers=headers,
        auth=credentials if credentials else httpx.USE_CLIENT_DEFAULT,
    )

    if not resp.is_success:
        logger.debug("Token request denied", realm=challenge.realm, status_code=resp.status_code)
        raise AuthenticationDenied(resp.status_code, realm=challenge.realm)

    token = _extract_token(resp.content)
    logger.debug("Received bearer token", realm=challenge.realm, expires_in=token.expires_in)
    return token
