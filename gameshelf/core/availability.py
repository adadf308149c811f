"""Availability checks — computed on demand, never stored in the catalog."""

from __future__ import annotations

import os
from typing import Iterable

from gameshelf.core.steam_scanner import SteamScanner
from gameshelf.models.catalog_entry import CatalogEntry


class AvailabilityChecker:
    """
    Answers "can this entry be launched right now?".

    Steam titles are available whenever Steam itself is installed (their
    install directory may not exist before the first install).  File
    entries are available while their file exists.
    """

    def __init__(self, steam_scanner: SteamScanner) -> None:
        self._steam = steam_scanner

    def is_available(self, entry: CatalogEntry) -> bool:
        if entry.is_external:
            return self._steam.is_installed
        return os.path.exists(entry.location)

    def available_count(self, entries: Iterable[CatalogEntry]) -> int:
        return sum(1 for e in entries if self.is_available(e))

    def unavailable_count(self, entries: Iterable[CatalogEntry]) -> int:
        return sum(1 for e in entries if not self.is_available(e))
