"""Asynchronous client for the Docker Registry HTTP API v2."""

__version__ = "0.1.0"

from .errors import (
    ApiError,
    AuthChallengeUnparsable,
    AuthenticationDenied,
    ChallengeParseError,
    DigestMismatch,
    NotFound,
    ProtocolViolation,
    RegistryError,
    TransportFailure,
    UnexpectedStatus,
)
from .config import RegistryConfig, load_config
from .modules.api import Client, check_response
from .modules.auth import AuthChallenge, Token, fetch_token, parse_challenge
from .modules.finders import paginate, stream_catalog, stream_tags
from .modules.formatters import Digest, parse_image_ref
from .modules.keepers import (
    download_blob,
    get_blob,
    get_manifest,
    get_manifest_and_ref,
    get_manifestref,
    has_blob,
    has_manifest,
)

__all__ = [
    "Client",
    "RegistryConfig",
    "load_config",
    "check_response",
    "AuthChallenge",
    "Token",
    "fetch_token",
    "parse_challenge",
    "paginate",
    "stream_catalog",
    "stream_tags",
    "Digest",
    "parse_image_ref",
    "has_manifest",
    "has_blob",
    "get_manifest",
    "get_manifest_and_ref",
    "get_manifestref",
    "get_blob",
    "download_blob",
    "ApiError",
    "RegistryError",
    "TransportFailure",
    "ChallengeParseError",
    "AuthChallengeUnparsable",
    "AuthenticationDenied",
    "ProtocolViolation",
    "NotFound",
    "UnexpectedStatus",
    "DigestMismatch",
]
