"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gameshelf.config import Config
    from gameshelf.core.availability import AvailabilityChecker
    from gameshelf.core.library_manager import LibraryManager
    from gameshelf.core.rom_scanner import RomScanner
    from gameshelf.core.steam_scanner import SteamScanner
    from gameshelf.data.library_cache import LibraryCache


@dataclass
class AppContext:
    """
    Central service container.

    Front ends receive this at construction time instead of building the
    catalog services themselves.
    """

    config: Config

    # Sources
    rom_scanner: RomScanner
    steam_scanner: SteamScanner

    # Catalog
    library_cache: LibraryCache
    library_manager: LibraryManager
    availability: AvailabilityChecker
