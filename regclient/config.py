"""
Client configuration.

Settings come from the environment and can be overridden per call:

    REGISTRY_HOST        registry host[:port] (default: registry-1.docker.io)
    REGISTRY_INSECURE    "1"/"true" to talk plain http
    REGISTRY_INDEX       Host header value (default: REGISTRY_HOST)
    REGISTRY_USERNAME    token service username
    REGISTRY_PASSWORD    token service password
    REGISTRY_USER_AGENT  User-Agent header
    REGISTRY_TIMEOUT     request timeout in seconds
    REGISTRY_PAGE_SIZE   default 'n' for catalog/tag listings
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from regclient import __version__

DEFAULT_REGISTRY = "registry-1.docker.io"
DEFAULT_USER_AGENT = f"regclient/{__version__}"
DEFAULT_TIMEOUT = 30.0

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RegistryConfig:
    registry: str = DEFAULT_REGISTRY
    insecure: bool = False
    index: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    user_agent: Optional[str] = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT
    page_size: Optional[int] = None

    @property
    def base_url(self) -> str:
        scheme = "http" if self.insecure else "https"
        return f"{scheme}://{self.registry}"

    @property
    def credentials(self) -> Optional[tuple]:
        if self.username is None and self.password is None:
            return None
        if not self.username or not self.password:
            raise ValueError("Registry credentials need both a username and a password")
        return (self.username, self.password)

    def with_overrides(self, **overrides) -> "RegistryConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def build(self, transport=None):
        """
        Create a Client for this configuration.

        Args:
            transport: Optional httpx.AsyncClient to use instead of a new one

        Raises:
            ValueError: only one of username/password is set
        """
        from regclient.modules.api.client import Client

        return Client(
            self.base_url,
            index=self.index or self.registry,
            credentials=self.credentials,
            user_agent=self.user_agent,
            transport=transport,
            timeout=self.timeout,
        )


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def load_config(**overrides) -> RegistryConfig:
    """
    Build a RegistryConfig from REGISTRY_* environment variables.

    Keyword overrides win over the environment; None overrides are ignored.
    """
    insecure = os.environ.get("REGISTRY_INSECURE")
    config = RegistryConfig().with_overrides(
        registry=os.environ.get("REGISTRY_HOST") or None,
        insecure=insecure.strip().lower() in _TRUTHY if insecure else None,
        index=os.environ.get("REGISTRY_INDEX") or None,
        username=os.environ.get("REGISTRY_USERNAME") or None,
        password=os.environ.get("REGISTRY_PASSWORD") or None,
        user_agent=os.environ.get("REGISTRY_USER_AGENT") or None,
        timeout=_env_float("REGISTRY_TIMEOUT"),
        page_size=_env_int("REGISTRY_PAGE_SIZE"),
    )
    return config.with_overrides(**overrides)
