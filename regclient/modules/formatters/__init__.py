from .digest import Digest
from .formatters import (
    parse_image_ref,
    is_digest_ref,
    catalog_path,
    tags_path,
    manifest_path,
    blob_path,
    human_readable_size,
)
