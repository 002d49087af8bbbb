"""
smtcore/version.py
==================
Single source of truth for SMT-Core version information.

Versioning: MAJOR.MINOR.PATCH[-PRE]. ``smtcore --version`` prints
FRAMEWORK_NAME and __version__.
"""

from __future__ import annotations

from typing import NamedTuple


class VersionInfo(NamedTuple):
    """Structured version information."""
    major: int
    minor: int
    patch: int
    pre_release: str = ""

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            return f"{base}-{self.pre_release}"
        return base


VERSION_INFO = VersionInfo(major=0, minor=2, patch=0)

__version__: str = str(VERSION_INFO)

FRAMEWORK_NAME = "SMT-Core"
