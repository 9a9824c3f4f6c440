# ABOUTME: Derives metadata attributes from stored absolute media file paths.
# ABOUTME: Pure functions used to backfill derived columns during schema upgrades.

import re
from dataclasses import dataclass

# /storage/<volume>/[<user>/]Android/<data|media|obb|sandbox>/<owner>/...
_OWNED_PATH_RE = re.compile(
    r"^/storage/[^/]+/(?:[0-9]+/)?Android/(?:data|media|obb|sandbox)/([^/]+)/.*$",
    re.IGNORECASE | re.DOTALL,
)
_VOLUME_NAME_RE = re.compile(r"^/storage/([^/]+)", re.IGNORECASE)
_RELATIVE_PATH_RE = re.compile(
    r"^/storage/[^/]+/(?:[0-9]+/)?(?:Android/sandbox/[^/]+/)?", re.IGNORECASE
)
_DOWNLOAD_PATH_RE = re.compile(
    r"^/storage/[^/]+/(?:[0-9]+/)?(?:Android/sandbox/[^/]+/)?Download/.+",
    re.IGNORECASE | re.DOTALL,
)

VOLUME_INTERNAL = "internal"
VOLUME_EXTERNAL_PRIMARY = "external_primary"


@dataclass(frozen=True)
class PathAttributes:
    """Every attribute that can be derived from a stored path alone."""

    owner_package_name: str | None
    volume_name: str
    relative_path: str | None
    is_download: bool


def extract_owner_package_name(path: object) -> str | None:
    """Return the owning application identifier for app-private media paths.

    Matching is case-insensitive, like the path column's NOCASE collation, but
    the identifier keeps the case it was stored with. Only the first segment
    after the app-private directory counts, and only for entries inside it;
    the app directory itself has no owner.

    Returns:
        The identifier, or None when the path is not app-private (or is not
        a string at all).
    """
    if not isinstance(path, str):
        return None
    match = _OWNED_PATH_RE.match(path)
    return match.group(1) if match else None


def extract_volume_name(path: object) -> str:
    """Return the storage volume name a path lives on.

    The emulated primary volume maps to ``external_primary``; other volumes
    are lower-cased; anything not under /storage is ``internal``.
    """
    if not isinstance(path, str):
        return VOLUME_INTERNAL
    match = _VOLUME_NAME_RE.match(path)
    if not match:
        return VOLUME_INTERNAL
    volume = match.group(1)
    if volume.lower() == "emulated":
        return VOLUME_EXTERNAL_PRIMARY
    return volume.lower()


def extract_relative_path(path: object) -> str | None:
    """Return the directory of a path relative to its volume root.

    The result always ends with a slash ("DCIM/Camera/"); files directly at
    the volume root yield "/". Paths not on a /storage volume yield None.
    """
    if not isinstance(path, str):
        return None
    match = _RELATIVE_PATH_RE.match(path)
    if not match:
        return None
    last_slash = path.rfind("/")
    if last_slash < match.end():
        return "/"
    return path[match.end() : last_slash + 1]


def is_download_path(path: object) -> bool:
    """Whether a path sits inside a volume's Download directory."""
    if not isinstance(path, str):
        return False
    return _DOWNLOAD_PATH_RE.match(path) is not None


def derive_path_attributes(path: object) -> PathAttributes:
    """Bundle every path-derived attribute for a single stored path."""
    return PathAttributes(
        owner_package_name=extract_owner_package_name(path),
        volume_name=extract_volume_name(path),
        relative_path=extract_relative_path(path),
        is_download=is_download_path(path),
    )
