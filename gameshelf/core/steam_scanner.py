"""Steam scanner — synthesize catalog entries from Steam app manifests."""

from __future__ import annotations

import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import vdf
from loguru import logger

from gameshelf.models.catalog_entry import (
    STEAM_EXTENSION,
    STEAM_PLATFORM,
    CatalogEntry,
    entry_id_for_steam_app,
)

# Steam lists tooling next to real games; these never become catalog entries.
DENYLIST: tuple[str, ...] = (
    "redistributable",
    "runtime",
    "sdk",
    "dedicated server",
    "proton",
    "steamworks",
)


def is_denylisted(name: str) -> bool:
    """True if *name* looks like a Steam tool rather than a game."""
    lowered = name.lower()
    return any(word in lowered for word in DENYLIST)


def _default_steam_root() -> Path:
    system = platform.system()
    home = Path.home()
    if system == "Darwin":
        return home / "Library" / "Application Support" / "Steam"
    if system == "Windows":
        return Path("C:/Program Files (x86)/Steam")
    for candidate in (home / ".steam" / "steam", home / ".local" / "share" / "Steam"):
        if (candidate / "steamapps").exists():
            return candidate
    return home / ".local" / "share" / "Steam"


def _default_app_path(steam_root: Path) -> Path:
    if platform.system() == "Darwin":
        return Path("/Applications/Steam.app")
    return steam_root


def _lower_keys(block: dict[str, Any]) -> dict[str, Any]:
    return {str(k).lower(): v for k, v in block.items()}


class SteamScanner:
    """
    Scans installed Steam games.

    Library roots come from ``steamapps/libraryfolders.vdf`` (the default
    root is always included); every ``appmanifest_<id>.acf`` under a root's
    ``steamapps`` folder becomes one entry unless its name is denylisted.
    """

    def __init__(self, steam_root: Path | None = None, app_path: Path | None = None) -> None:
        self._steam_root = steam_root or _default_steam_root()
        self._app_path = app_path or _default_app_path(self._steam_root)

    @property
    def steam_root(self) -> Path:
        return self._steam_root

    @property
    def is_installed(self) -> bool:
        """Whether the Steam application is present; its titles are available iff it is."""
        return self._app_path.exists()

    # ── Library discovery ──

    def library_folders(self) -> list[Path]:
        """Default root first, then every extra library declared by Steam."""
        folders: list[Path] = [self._steam_root]
        manifest = self._steam_root / "steamapps" / "libraryfolders.vdf"
        if not manifest.is_file():
            return folders

        try:
            with open(manifest, encoding="utf-8", errors="replace") as f:
                data = vdf.load(f)
        except (OSError, SyntaxError, ValueError, TypeError, KeyError) as e:
            logger.debug(f"Cannot parse {manifest}: {e}")
            return folders

        for block in data.values():
            if not isinstance(block, dict):
                continue
            for key, value in block.items():
                path: str | None = None
                if isinstance(value, dict):
                    path = _lower_keys(value).get("path")
                elif isinstance(value, str) and key.isdigit():
                    # Legacy layout: "1" "D:\\SteamLibrary"
                    path = value
                if path:
                    folder = Path(path)
                    if folder not in folders:
                        folders.append(folder)
        return folders

    # ── Scanning ──

    def scan(self) -> list[CatalogEntry]:
        """Scan every Steam library for installed games."""
        if not self._steam_root.exists():
            logger.debug(f"Steam not found at {self._steam_root}")
            return []

        games: list[CatalogEntry] = []
        for library in self.library_folders():
            games.extend(self.scan_library(library / "steamapps"))
        logger.info(f"Steam scan complete — {len(games)} game(s)")
        return games

    def scan_library(self, steamapps: Path) -> list[CatalogEntry]:
        try:
            manifests = sorted(steamapps.glob("appmanifest_*.acf"))
        except OSError as e:
            logger.debug(f"Cannot list {steamapps}: {e}")
            return []

        games: list[CatalogEntry] = []
        for manifest in manifests:
            entry = self.parse_app_manifest(manifest)
            if entry is not None:
                games.append(entry)
        return games

    def parse_app_manifest(self, manifest: Path) -> CatalogEntry | None:
        """Parse one ``appmanifest_*.acf``; None if unreadable, incomplete or denylisted."""
        try:
            with open(manifest, encoding="utf-8", errors="replace") as f:
                data = vdf.load(f)
        except (OSError, SyntaxError, ValueError, TypeError, KeyError) as e:
            logger.debug(f"Skipping unreadable manifest {manifest.name}: {e}")
            return None

        state = _lower_keys(data).get("appstate", data)
        if not isinstance(state, dict):
            return None
        fields = _lower_keys(state)

        app_id = str(fields.get("appid", "")).strip()
        name = fields.get("name")
        if not app_id.isdigit() or not isinstance(name, str) or not name:
            logger.debug(f"Skipping manifest {manifest.name}: missing appid/name")
            return None

        if is_denylisted(name):
            logger.debug(f"Skipping Steam tool: {name}")
            return None

        install_dir = str(fields.get("installdir") or "")
        try:
            size = int(fields.get("sizeondisk") or 0)
        except (TypeError, ValueError):
            size = 0

        date_added = datetime.now(tz=timezone.utc)
        last_updated = fields.get("lastupdated")
        if last_updated:
            try:
                date_added = datetime.fromtimestamp(float(last_updated), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError, OSError):
                pass

        return CatalogEntry(
            id=entry_id_for_steam_app(app_id),
            name=name,
            location=str(manifest.parent / "common" / install_dir),
            extension=STEAM_EXTENSION,
            platform=STEAM_PLATFORM,
            size_bytes=size,
            date_added=date_added,
            steam_app_id=app_id,
        )
