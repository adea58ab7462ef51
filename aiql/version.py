"""
aiql/version.py
===============
Single source of truth for the AIQL reasoning core version.

    from aiql.version import __version__, VERSION_INFO
"""

from __future__ import annotations

from typing import NamedTuple


class VersionInfo(NamedTuple):
    major: int
    minor: int
    patch: int
    pre_release: str = ""

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            return f"{base}-{self.pre_release}"
        return base


VERSION_INFO = VersionInfo(major=2, minor=5, patch=0)

__version__: str = str(VERSION_INFO)

# Distribution name, reported by the server health check
FRAMEWORK_NAME = "aiql-reasoning"
