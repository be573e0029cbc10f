"""Library version numbers."""

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0


def version() -> tuple[int, int, int]:
    """Return the library version as (major, minor, patch)."""
    return (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH)


def version_major() -> int:
    """Return the major version number."""
    return VERSION_MAJOR


def version_minor() -> int:
    """Return the minor version number."""
    return VERSION_MINOR


def version_patch() -> int:
    """Return the patch version number."""
    return VERSION_PATCH