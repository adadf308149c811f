"""Application configuration — JSON-based, with file locking and batch update support."""

from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from gameshelf.models.platform import Platform

_instance: "Config | None" = None

# Default data directory
_DEFAULT_DATA_DIR = Path.home() / "Documents" / "GameShelf"


def get_config() -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config()
    return _instance


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


@dataclass(frozen=True)
class ScanSettings:
    """Immutable copy of everything a library refresh reads from the config."""

    rom_directories: tuple[str, ...] = ()
    custom_platforms: tuple[Platform, ...] = ()
    platform_overrides: dict[str, str] = field(default_factory=dict)
    include_steam_games: bool = True
    steam_path: str = ""


class Config:
    """JSON-based application configuration with file locking."""

    _DEFAULTS: dict[str, Any] = {
        "rom_directories": [],
        "custom_platforms": [],
        "platform_overrides": {},  # absolute ROM path -> platform name
        "include_steam_games": True,
        "steam_path": "",
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = config_dir or _DEFAULT_DATA_DIR
        self._path = self._dir / "config.json"
        self._lock = threading.RLock()
        self._defer_save = False
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = json.loads(json.dumps(self._DEFAULTS))  # deep copy defaults
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as f:
                    user_data = json.load(f)
                if not isinstance(user_data, dict):
                    raise ValueError("config root is not an object")
                self._deep_merge(self._data, user_data)
            except (json.JSONDecodeError, ValueError, OSError) as e:
                logger.warning(f"Failed to load config, using defaults: {e}")

    def _deep_merge(self, base: dict, override: dict) -> None:
        """Recursively merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save(self) -> None:
        """Persist config to disk with file locking."""
        if self._defer_save:
            return
        with self._lock:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, ensure_ascii=False, indent=2)
                tmp_path.replace(self._path)
            except OSError as e:
                logger.error(f"Failed to save config: {e}")
                if tmp_path.exists():
                    tmp_path.unlink(missing_ok=True)

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batching multiple config changes into a single write."""
        self._defer_save = True
        try:
            yield
        finally:
            self._defer_save = False
            self._save()

    # ── Generic access ──

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        parts = key.split(".")
        with self._lock:
            node = self._data
            for part in parts:
                if isinstance(node, dict) and part in node:
                    node = node[part]
                else:
                    return default
            return node

    def set(self, key: str, value: Any) -> None:
        """Set a config value by dot-separated key path."""
        parts = key.split(".")
        with self._lock:
            node = self._data
            for part in parts[:-1]:
                if part not in node or not isinstance(node[part], dict):
                    node[part] = {}
                node = node[part]
            node[parts[-1]] = value
            self._save()

    # ── Typed properties ──

    @property
    def data_dir(self) -> Path:
        return self._dir

    @property
    def rom_directories(self) -> list[str]:
        return list(self.get("rom_directories", []))

    @rom_directories.setter
    def rom_directories(self, value: list[str]) -> None:
        self.set("rom_directories", list(value))

    @property
    def include_steam_games(self) -> bool:
        return bool(self.get("include_steam_games", True))

    @include_steam_games.setter
    def include_steam_games(self, value: bool) -> None:
        self.set("include_steam_games", value)

    @property
    def steam_path(self) -> Path | None:
        raw = self.get("steam_path", "")
        return Path(raw) if raw else None

    @steam_path.setter
    def steam_path(self, value: Path | None) -> None:
        self.set("steam_path", str(value) if value else "")

    @property
    def platform_overrides(self) -> dict[str, str]:
        return dict(self.get("platform_overrides", {}))

    @property
    def custom_platforms(self) -> list[Platform]:
        platforms: list[Platform] = []
        for raw in self.get("custom_platforms", []):
            try:
                platforms.append(Platform.from_dict(raw))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed custom platform {raw!r}: {e}")
        return platforms

    # ── ROM directories ──

    def add_rom_directory(self, path: str) -> None:
        with self._lock:
            dirs = self.rom_directories
            if path in dirs:
                return
            dirs.append(path)
            self.set("rom_directories", dirs)

    def remove_rom_directory(self, path: str) -> None:
        with self._lock:
            dirs = [d for d in self.rom_directories if d != path]
            self.set("rom_directories", dirs)

    # ── Custom platforms ──

    def add_custom_platform(self, platform: Platform) -> None:
        with self._lock:
            raw = list(self.get("custom_platforms", []))
            raw.append(platform.to_dict())
            self.set("custom_platforms", raw)

    # ── Platform overrides ──

    def set_platform_override(self, platform: str, rom_path: str) -> None:
        with self._lock:
            overrides = self.platform_overrides
            overrides[rom_path] = platform
            self.set("platform_overrides", overrides)

    def remove_platform_override(self, rom_path: str) -> None:
        with self._lock:
            overrides = self.platform_overrides
            if overrides.pop(rom_path, None) is not None:
                self.set("platform_overrides", overrides)

    def get_platform_override(self, rom_path: str) -> str | None:
        return self.platform_overrides.get(rom_path)

    # ── Snapshot ──

    def scan_settings(self) -> ScanSettings:
        """Copy the scan inputs under the lock so a refresh never reads live state."""
        with self._lock:
            return ScanSettings(
                rom_directories=tuple(self.rom_directories),
                custom_platforms=tuple(self.custom_platforms),
                platform_overrides=self.platform_overrides,
                include_steam_games=self.include_steam_games,
                steam_path=str(self.get("steam_path", "") or ""),
            )
