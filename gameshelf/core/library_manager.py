"""Library manager — reconcile fresh scans with the cached catalog."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from gameshelf.config import Config, ScanSettings
from gameshelf.core.library_filter import platforms_in, sort_catalog
from gameshelf.core.platform_registry import PlatformRegistry
from gameshelf.core.rom_scanner import RomScanner
from gameshelf.core.steam_scanner import SteamScanner
from gameshelf.data.library_cache import LibraryCache
from gameshelf.models.catalog_entry import CatalogEntry

CatalogCallback = Callable[[list[CatalogEntry]], None]


def dedupe_entries(entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[CatalogEntry] = []
    for entry in entries:
        if entry.id not in seen:
            seen.add(entry.id)
            unique.append(entry)
    return unique


def merge_with_cache(
    scanned: Iterable[CatalogEntry], cached: Iterable[CatalogEntry]
) -> list[CatalogEntry]:
    """
    Scanned entries plus every cached entry the scan did not rediscover.

    Cache-only ("ghost") entries are kept unmodified so a disconnected drive
    never drops titles from the library.
    """
    result = dedupe_entries(scanned)
    scanned_ids = {e.id for e in result}
    missing = [e for e in dedupe_entries(cached) if e.id not in scanned_ids]
    result.extend(missing)
    logger.debug(
        f"Merged {len(scanned_ids)} scanned + {len(missing)} cached = {len(result)} total"
    )
    return result


class LibraryManager:
    """
    Reconciliation orchestrator.

    One ``refresh`` loads the cache, runs the ROM and Steam scanners in
    parallel, merges the results with cache-only entries, sorts, persists
    and returns the catalog.  Configuration is read once, as a
    :class:`ScanSettings` snapshot, at the start of every refresh.
    """

    def __init__(
        self,
        config: Config,
        cache: LibraryCache,
        rom_scanner: RomScanner,
        steam_scanner: SteamScanner,
    ) -> None:
        self._config = config
        self._cache = cache
        self._rom_scanner = rom_scanner
        self._steam_scanner = steam_scanner
        self._catalog: list[CatalogEntry] = []
        self._lock = threading.Lock()
        self._save_lock = threading.Lock()
        self._next_generation = 0
        self._completed_generation = -1

    # ── Read-only access ──

    @property
    def catalog(self) -> list[CatalogEntry]:
        with self._lock:
            return list(self._catalog)

    def get(self, entry_id: str) -> CatalogEntry | None:
        with self._lock:
            for entry in self._catalog:
                if entry.id == entry_id:
                    return entry
        return None

    def platforms(self) -> list[str]:
        return platforms_in(self.catalog)

    # ── Refresh ──

    def refresh(
        self,
        settings: ScanSettings | None = None,
        on_cached: CatalogCallback | None = None,
    ) -> list[CatalogEntry]:
        """
        Rebuild the catalog.

        *on_cached* receives the cached catalog before scanning starts, but
        only when nothing is held in memory yet and the cache is non-empty.
        If a newer refresh finished first, this one's result is discarded
        and the newer catalog is returned instead.
        """
        if settings is None:
            settings = self._config.scan_settings()

        with self._lock:
            generation = self._next_generation
            self._next_generation += 1

        cached = self._cache.load()

        surface_cached = False
        with self._lock:
            if cached and not self._catalog:
                self._catalog = sort_catalog(dedupe_entries(cached))
                surface_cached = True
        if surface_cached and on_cached is not None:
            on_cached(self.catalog)

        scanned = self._scan_sources(settings)
        merged = sort_catalog(merge_with_cache(scanned, cached))

        with self._lock:
            if generation < self._completed_generation:
                logger.info(f"Discarding stale refresh #{generation}")
                return list(self._catalog)
            self._completed_generation = generation
            self._catalog = merged

        # Readers only wait for the swap above, never for the disk write
        with self._save_lock:
            with self._lock:
                latest = self._completed_generation
            if generation == latest:
                self._cache.save(merged)

        logger.info(f"Library refresh #{generation} complete — {len(merged)} title(s)")
        return list(merged)

    def _scan_sources(self, settings: ScanSettings) -> list[CatalogEntry]:
        registry = PlatformRegistry(settings.custom_platforms)
        steam = self._steam_scanner_for(settings)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="library-scan") as pool:
            rom_future = pool.submit(
                self._rom_scanner.scan,
                settings.rom_directories,
                registry,
                settings.platform_overrides,
            )
            steam_future: Future[list[CatalogEntry]] | None = None
            if settings.include_steam_games and steam.is_installed:
                steam_future = pool.submit(steam.scan)

            scanned = self._collect(rom_future, "ROM")
            if steam_future is not None:
                scanned.extend(self._collect(steam_future, "Steam"))
        return scanned

    def _steam_scanner_for(self, settings: ScanSettings) -> SteamScanner:
        if settings.steam_path and Path(settings.steam_path) != self._steam_scanner.steam_root:
            return SteamScanner(Path(settings.steam_path))
        return self._steam_scanner

    @staticmethod
    def _collect(future: Future[list[CatalogEntry]], source: str) -> list[CatalogEntry]:
        try:
            return list(future.result())
        except Exception as e:
            logger.error(f"{source} scan failed: {e}")
            return []

    # ── Maintenance ──

    def clear_cache(self) -> None:
        """Forget every entry, ghosts included."""
        with self._save_lock, self._lock:
            self._cache.clear()
            self._catalog = []
