from .content import (
    MANIFEST_MEDIA_TYPES,
    has_manifest,
    has_blob,
    get_manifest,
    get_manifest_and_ref,
    get_manifestref,
    get_blob,
)
from .downloaders import download_blob
