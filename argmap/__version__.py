"""
Version information for argmap package.

This module provides semantic versioning information following PEP 440.
Import VERSION_INFO for programmatic access to version components.
"""

from __future__ import annotations

# Version components
VERSION_MAJOR = 0
VERSION_MINOR = 3
VERSION_PATCH = 0
VERSION_SUFFIX = ""  # e.g., "a1", "b2", "rc1", or "" for final

# Construct version string
VERSION_INFO = (VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH)
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"
if VERSION_SUFFIX:
    __version__ += VERSION_SUFFIX

PACKAGE_NAME = "argmap"


def get_version() -> str:
    """Return the current version string."""
    return __version__


__all__ = [
    "__version__",
    "VERSION_INFO",
    "VERSION_MAJOR",
    "VERSION_MINOR",
    "VERSION_PATCH",
    "VERSION_SUFFIX",
    "PACKAGE_NAME",
    "get_version",
]
