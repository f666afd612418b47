"""
Typed registry client errors.

Transport failures (DNS, TLS, timeouts, dropped connections) are raised by
httpx itself and are never wrapped; ``TransportFailure`` is exported so
callers can catch them next to the registry errors.
"""

import json
from dataclasses import dataclass
from typing import Optional

import httpx

TransportFailure = httpx.TransportError


@dataclass(frozen=True)
class ApiError:
    """One entry of the registry's ``{"errors": [...]}`` body."""

    code: str
    message: str = ""
    detail: object = None


class RegistryError(RuntimeError):
    """Base registry client error."""


class ChallengeParseError(RegistryError, ValueError):
    """A WWW-Authenticate header could not be parsed as a Bearer challenge."""


class AuthenticationDenied(RegistryError):
    """The token endpoint rejected the credentials or the requested scope."""

    def __init__(self, status: int, realm: str = ""):
        self.status = status
        self.realm = realm
        super().__init__(f"token endpoint {realm or '?'} denied authentication (HTTP {status})")


class ProtocolViolation(RegistryError):
    """Well-formed HTTP whose body does not have the expected shape."""


class UnexpectedStatus(RegistryError):
    """A status the caller did not ask for, with any server error triples."""

    def __init__(self, status: int, errors: Optional[tuple] = None, url: str = ""):
        self.status = status
        self.errors = errors
        self.url = url
        message = f"unexpected HTTP {status}"
        if url:
            message += f" from {url}"
        if errors:
            message += ": " + "; ".join(f"{e.code}: {e.message}" for e in errors)
        super().__init__(message)


class NotFound(UnexpectedStatus):
    """404 on a fetch or listing path. An expected outcome, not an anomaly."""


class AuthChallengeUnparsable(UnexpectedStatus):
    """401 whose WWW-Authenticate header is missing or malformed."""


class DigestMismatch(RegistryError):
    """Downloaded bytes do not hash to the digest they were fetched by."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"digest mismatch: expected {expected}, got {actual}")


def parse_api_errors(body: bytes) -> Optional[tuple]:
    """
    Decode the registry error schema from a response body.

    Returns a tuple of ApiError, or None when the body is empty, not JSON,
    or has no usable ``errors`` array.
    """
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    entries = payload.get("errors")
    if not isinstance(entries, list):
        return None

    errors = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        errors.append(
            ApiError(
                code=str(entry.get("code", "")),
                message=str(entry.get("message") or ""),
                detail=entry.get("detail"),
            )
        )
    return tuple(errors) or None
