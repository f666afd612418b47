"""
Lazy pagination over registry listings.

Catalog and tag listings are split into pages chained by a
``Link: <url>; rel="next"`` header. paginate() walks that chain one page
at a time, only when the consumer asks for an item the buffer does not
hold. Nothing is cached: registries may list thousands of entries, so
re-listing means starting a new generator.
"""

import json
from typing import AsyncIterator, Optional
from urllib.parse import urljoin

import httpx
import structlog

from regclient.errors import ProtocolViolation
from regclient.modules.api.response import check_response

logger = structlog.stdlib.get_logger(__name__)


def next_page_url(resp: httpx.Response) -> Optional[str]:
    """Return the rel="next" target of the Link header, or None on the last page."""
    link = resp.links.get("next")
    if not link or not link.get("url"):
        return None
    # Registries usually send a path; resolve it against the page it came from.
    return urljoin(str(resp.request.url), link["url"])


def decode_page(body: bytes, key: str) -> list:
    """
    Decode one page body into its item list.

    A missing or null ``key`` is an empty page.

    Raises:
        ProtocolViolation: body is not a JSON object or ``key`` is not a list
    """
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise ProtocolViolation(f"Page body is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ProtocolViolation("Page body is not a JSON object")

    items = payload.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ProtocolViolation(f"Page field '{key}' is not a list")
    return items


async def paginate(client, path: str, key: str, params=None) -> AsyncIterator:
    """
    Yield items of a paginated listing, fetching pages on demand.

    Args:
        client: regclient Client
        path: Path of the first page (e.g., "/v2/_catalog")
        key: Body field holding the page's items (e.g., "repositories")
        params: Query parameters for the first page only; next links carry their own

    Yields:
        Items in registry order, duplicates included

    Raises:
        ProtocolViolation: a page could not be decoded
        NotFound, UnexpectedStatus: a page fetch failed
    """
    url: Optional[str] = path
    page = 0
    while url is not None:
        resp = await client.execute("GET", url, params=params)
        params = None
        check_response(resp)

        # Decode the whole page before yielding anything from it.
        items = decode_page(resp.content, key)
        url = next_page_url(resp)
        page += 1
        logger.debug("Fetched page", path=path, page=page, items=len(items), has_next=url is not None)

        for item in items:
            yield item
