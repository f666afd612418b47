"""
Content-addressed retrieval of manifests and blobs.

Bodies are returned exactly as received. When a manifest or blob is
fetched by digest, checking that the bytes hash to it is up to the caller
(see Digest.verify).
"""

from typing import Optional

import structlog

from regclient.modules.api.response import check_response
from regclient.modules.formatters import blob_path, manifest_path

logger = structlog.stdlib.get_logger(__name__)

CONTENT_DIGEST_HEADER = "Docker-Content-Digest"

MANIFEST_MEDIA_TYPES = (
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.docker.distribution.manifest.v1+prettyjws",
    "application/vnd.docker.distribution.manifest.v1+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.oci.image.index.v1+json",
)
MANIFEST_ACCEPT = {"Accept": ", ".join(MANIFEST_MEDIA_TYPES)}


# =============================================================================
# Existence checks
# =============================================================================

async def _exists(client, path: str, headers: Optional[dict] = None) -> bool:
    resp = await client.execute("HEAD", path, headers=headers)
    if resp.status_code == 404:
        logger.debug("Not found", path=path)
        return False
    check_response(resp)
    return True


async def has_manifest(client, name: str, reference: str) -> bool:
    """
    Check whether a manifest exists.

    Returns:
        True on 2xx, False on 404

    Raises:
        UnexpectedStatus: any other status, so "absent" and "unknown" stay distinct
    """
    return await _exists(client, manifest_path(name, reference), MANIFEST_ACCEPT)


async def has_blob(client, name: str, digest: str) -> bool:
    """
    Check whether a blob exists.

    Returns:
        True on 2xx, False on 404

    Raises:
        UnexpectedStatus: any other status
    """
    return await _exists(client, blob_path(name, digest))


# =============================================================================
# Fetching
# =============================================================================

async def get_manifest_and_ref(client, name: str, reference: str) -> tuple:
    """
    Fetch a manifest plus the digest the registry reports for it.

    Returns:
        (raw manifest bytes, Docker-Content-Digest header or None)

    Raises:
        NotFound: 404
        UnexpectedStatus: any other non-2xx status
    """
    resp = await client.execute("GET", manifest_path(name, reference), headers=MANIFEST_ACCEPT)
    check_response(resp)
    logger.debug(
        "Fetched manifest",
        name=name,
        reference=reference,
        media_type=resp.headers.get("Content-Type"),
        size=len(resp.content),
    )
    return resp.content, resp.headers.get(CONTENT_DIGEST_HEADER)


async def get_manifest(client, name: str, reference: str) -> bytes:
    """Fetch a manifest by tag or digest as raw bytes."""
    body, _ = await get_manifest_and_ref(client, name, reference)
    return body


async def get_manifestref(client, name: str, reference: str) -> Optional[str]:
    """
    Resolve a tag (or digest) to the registry's content digest with a HEAD.

    Returns:
        Docker-Content-Digest header value, or None if the manifest is absent
        or the registry did not send the header
    """
    resp = await client.execute("HEAD", manifest_path(name, reference), headers=MANIFEST_ACCEPT)
    if resp.status_code == 404:
        logger.debug("Manifest not found", name=name, reference=reference)
        return None
    check_response(resp)
    return resp.headers.get(CONTENT_DIGEST_HEADER)


async def get_blob(client, name: str, digest: str) -> bytes:
    """
    Fetch a blob by digest as raw bytes.

    Registries commonly redirect blob downloads to object storage; the
    transport follows those redirects.

    Raises:
        NotFound: 404
        UnexpectedStatus: any other non-2xx status
    """
    resp = await client.execute("GET", blob_path(name, digest))
    check_response(resp)
    logger.debug("Fetched blob", name=name, digest=digest, size=len(resp.content))
    return resp.content
