"""Repository and tag listings."""

from typing import AsyncIterator, Optional

from regclient.modules.formatters import catalog_path, tags_path
from .pagination import paginate


def _page_params(page_size: Optional[int]) -> Optional[dict]:
    if page_size is None:
        return None
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return {"n": page_size}


def stream_catalog(client, page_size: Optional[int] = None) -> AsyncIterator[str]:
    """
    Stream repository names from /v2/_catalog.

    Args:
        client: regclient Client
        page_size: Optional 'n' hint; the registry may return fewer per page
    """
    return paginate(client, catalog_path(), "repositories", params=_page_params(page_size))


def stream_tags(client, name: str, page_size: Optional[int] = None) -> AsyncIterator[str]:
    """
    Stream tag names of one repository from /v2/<name>/tags/list.

    Args:
        client: regclient Client
        name: Repository name (e.g., "library/ubuntu")
        page_size: Optional 'n' hint; the registry may return fewer per page
    """
    return paginate(client, tags_path(name), "tags", params=_page_params(page_size))
