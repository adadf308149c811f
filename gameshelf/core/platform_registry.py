"""Platform registry — maps file extensions to platform names."""

from __future__ import annotations

import os
from typing import Iterable, Mapping

from gameshelf.models.platform import (
    BUILT_IN_PLATFORMS,
    UNKNOWN_PLATFORM,
    Platform,
    normalize_extension,
)


class PlatformRegistry:
    """
    Ordered platform table: built-ins in declaration order, then custom
    platforms in the order the user added them.

    Several platforms may claim the same extension.  Resolution is
    first-match-wins over that order, so the answer for a shared extension
    is deterministic but not necessarily right; a per-path entry in the
    override table always takes precedence.
    """

    def __init__(self, custom_platforms: Iterable[Platform] = ()) -> None:
        self._platforms: tuple[Platform, ...] = BUILT_IN_PLATFORMS + tuple(custom_platforms)
        self._extensions = frozenset(
            ext for platform in self._platforms for ext in platform.extensions
        )

    @property
    def platforms(self) -> tuple[Platform, ...]:
        return self._platforms

    def platform_names(self) -> list[str]:
        return [p.name for p in self._platforms]

    def get(self, name: str) -> Platform | None:
        for platform in self._platforms:
            if platform.name == name:
                return platform
        return None

    def all_extensions(self) -> frozenset[str]:
        """Every extension claimed by at least one platform."""
        return self._extensions

    def platform_for_extension(self, ext: str) -> str:
        ext = normalize_extension(ext)
        for platform in self._platforms:
            if ext in platform.extensions:
                return platform.name
        return UNKNOWN_PLATFORM

    def resolve(
        self,
        path: str | os.PathLike[str],
        ext: str,
        overrides: Mapping[str, str] | None = None,
    ) -> str:
        """Platform for one file: manual override first, then extension lookup."""
        if overrides:
            override = overrides.get(os.fspath(path))
            if override:
                return override
        return self.platform_for_extension(ext)
