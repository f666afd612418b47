import os
from pathlib import Path

import structlog

from regclient.errors import DigestMismatch
from regclient.modules.formatters import Digest
from regclient.modules.formatters.digest import HEX_LENGTHS
from .content import get_blob

logger = structlog.stdlib.get_logger(__name__)


# =============================================================================
# Blob Download
# =============================================================================

async def download_blob(client, name, digest, output_dir=".", verify=True) -> Path:
    """
    Fetch a blob and save it as <output_dir>/<algorithm>_<hex>.

    With verify on, the bytes must hash to the digest before anything is
    written; a mismatch raises DigestMismatch and leaves no file behind.
    """
    expected = Digest.parse(digest)
    if verify and expected.algorithm not in HEX_LENGTHS:
        raise ValueError(f"Cannot verify {expected.algorithm} digests, pass verify=False to skip")
    data = await get_blob(client, name, str(expected))

    if verify and not expected.verify(data):
        actual = Digest.of(data, expected.algorithm)
        raise DigestMismatch(str(expected), str(actual))

    os.makedirs(output_dir, exist_ok=True)
    path = Path(output_dir) / expected.filename()
    with open(path, "wb") as f:
        f.write(data)

    logger.debug("Saved blob", name=name, digest=str(expected), path=str(path), size=len(data))
    return path
