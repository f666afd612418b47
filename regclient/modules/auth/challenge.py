"""
WWW-Authenticate Bearer challenge parsing.

    Bearer realm="https://auth.docker.io/token",service="registry.docker.io",scope="repository:library/busybox:pull"

realm and service are mandatory. scope is optional; registries leave it out
for endpoints such as the catalog that want a registry-wide token.
"""

import re
from dataclasses import dataclass
from typing import Optional

from regclient.errors import ChallengeParseError

_SCHEME_RE = re.compile(r"\s*([A-Za-z][A-Za-z0-9!#$%&'*+.^_`|~-]*)(?:\s+(.*))?\s*$", re.DOTALL)
_PARAM_RE = re.compile(
    r'\s*([A-Za-z0-9!#$%&\'*+.^_`|~-]+)\s*=\s*(?:"((?:[^"\\]|\\.)*)"|([^\s,"]+))\s*',
    re.DOTALL,
)
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class AuthChallenge:
    realm: str
    service: str
    scope: Optional[str] = None


def _parse_params(text: str) -> dict:
    """Parse 'k1="v1", k2=v2' into a dict with lower-cased keys."""
    params = {}
    pos = 0
    while pos < len(text):
        # Tolerate empty list elements: 'a="1",,b="2"'
        if text[pos] in ", \t":
            pos += 1
            continue
        m = _PARAM_RE.match(text, pos)
        if not m:
            raise ChallengeParseError(f"Malformed challenge parameter at offset {pos}: {text[pos:]!r}")
        key = m.group(1).lower()
        if m.group(2) is not None:
            value = _ESCAPE_RE.sub(r"\1", m.group(2))
        else:
            value = m.group(3)
        params.setdefault(key, value)
        pos = m.end()
        if pos < len(text) and text[pos] != ",":
            raise ChallengeParseError(f"Expected ',' at offset {pos}: {text[pos:]!r}")
    return params


def parse_challenge(header: Optional[str]) -> AuthChallenge:
    """
    Parse a WWW-Authenticate header value into an AuthChallenge.

    Args:
        header: Raw header value

    Returns:
        AuthChallenge with realm, service and (optional) scope

    Raises:
        ChallengeParseError: missing or non-Bearer scheme, missing realm or
            service, or malformed quoting
    """
    if not header or not header.strip():
        raise ChallengeParseError("Empty WWW-Authenticate header")

    m = _SCHEME_RE.match(header)
    if not m:
        raise ChallengeParseError(f"Missing auth scheme: {header!r}")
    scheme, rest = m.group(1), m.group(2) or ""
    if scheme.lower() != "bearer":
        raise ChallengeParseError(f"Unsupported auth scheme: {scheme}")

    params = _parse_params(rest)

    realm = params.get("realm")
    if not realm:
        raise ChallengeParseError("Bearer challenge has no realm")
    service = params.get("service")
    if not service:
        raise ChallengeParseError("Bearer challenge has no service")

    return AuthChallenge(realm=realm, service=service, scope=params.get("scope") or None)
