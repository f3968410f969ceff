"""Version information stamped into the build."""

_CRC_VERSION = "0.0.0-unset"
_COMMIT_SHA = "sha-unset"
_BUNDLE_VERSION = "0.0.0-unset"


def get_crc_version() -> str:
    """Return the version of this tool."""
    return _CRC_VERSION


def get_commit_sha() -> str:
    """Return the commit the build was made from."""
    return _COMMIT_SHA


def get_bundle_version() -> str:
    """Return the bundle version released together with this tool."""
    return _BUNDLE_VERSION