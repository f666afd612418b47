
#========= REFERENCES
def parse_image_ref(image_ref, default_tag="latest"):
    """
    Split 'repo:tag' or 'repo@algorithm:hex' into (name, reference).

    Only the part after the last '/' may carry the tag, so registry-style
    names like 'team/app' are left alone. A missing tag defaults to 'latest'.
    """
    if "@" in image_ref:
        name, reference = image_ref.split("@", 1)
    else:
        slash = image_ref.rfind("/")
        colon = image_ref.rfind(":")
        if colon > slash:
            name, reference = image_ref[:colon], image_ref[colon + 1:]
        else:
            name, reference = image_ref, default_tag
    if not name or not reference:
        raise ValueError(f"Invalid image reference: '{image_ref}'")
    return name, reference


def is_digest_ref(reference: str) -> bool:
    """True when a manifest reference is a digest rather than a tag."""
    # Tags may not contain ':' so any colon means algorithm:hex.
    return ":" in reference


#========= PATHS
def catalog_path():
    return "/v2/_catalog"


def tags_path(name):
    return f"/v2/{name}/tags/list"


def manifest_path(name, reference):
    return f"/v2/{name}/manifests/{reference}"


def blob_path(name, digest):
    return f"/v2/{name}/blobs/{digest}"


#========= FORMATTER
def human_readable_size(size):
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"
