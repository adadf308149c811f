"""Catalog entry model — one discovered title, filesystem- or Steam-backed."""

from __future__ import annotations

import base64
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from gameshelf.models.platform import UNKNOWN_PLATFORM
from gameshelf.utils import format_size

STEAM_ID_PREFIX = "steam_"
STEAM_EXTENSION = ".steam"
STEAM_PLATFORM = "Steam"

_STEAM_CDN = "https://steamcdn-a.akamaihd.net/steam/apps"

# "(USA)", "(Rev 1)", "[!]", "[b1]" …
_TAG_PATTERNS = (
    re.compile(r"\s*\([^)]*\)"),
    re.compile(r"\s*\[[^\]]*\]"),
)


def entry_id_for_path(path: str | os.PathLike[str]) -> str:
    """Stable id for a filesystem entry: base64 of the path's raw bytes."""
    return base64.b64encode(os.fsencode(path)).decode("ascii")


def path_for_entry_id(entry_id: str) -> str:
    """Inverse of :func:`entry_id_for_path`."""
    return os.fsdecode(base64.b64decode(entry_id.encode("ascii"), validate=True))


def entry_id_for_steam_app(app_id: str) -> str:
    return f"{STEAM_ID_PREFIX}{app_id}"


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class CatalogEntry:
    """Catalog record — stored in library_cache.json."""

    id: str
    name: str
    location: str
    extension: str  # ".sfc" … or ".steam"
    platform: str = UNKNOWN_PLATFORM
    size_bytes: int = 0
    date_added: datetime = field(default_factory=_now)
    steam_app_id: str | None = None

    def __post_init__(self) -> None:
        if not self.platform:
            self.platform = UNKNOWN_PLATFORM

    @property
    def is_external(self) -> bool:
        """True for titles synthesized from Steam manifests."""
        return self.steam_app_id is not None

    @property
    def path(self) -> Path:
        return Path(self.location)

    @property
    def display_name(self) -> str:
        """Name with region / dump tags removed; Steam names are already clean."""
        if self.is_external:
            return self.name
        cleaned = self.name
        for pattern in _TAG_PATTERNS:
            cleaned = pattern.sub("", cleaned)
        return cleaned.strip() or self.name

    @property
    def formatted_size(self) -> str:
        return format_size(self.size_bytes)

    @property
    def steam_header_url(self) -> str | None:
        if self.steam_app_id is None:
            return None
        return f"{_STEAM_CDN}/{self.steam_app_id}/library_600x900.jpg"

    @property
    def steam_capsule_url(self) -> str | None:
        if self.steam_app_id is None:
            return None
        return f"{_STEAM_CDN}/{self.steam_app_id}/header.jpg"

    # ── Serialization ──

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "extension": self.extension,
            "platform": self.platform,
            "size_bytes": self.size_bytes,
            "date_added": self.date_added.isoformat(),
        }
        if self.steam_app_id is not None:
            data["steam_app_id"] = self.steam_app_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CatalogEntry:
        """Rebuild an entry from its cached dict; raises on missing fields."""
        date_added = datetime.fromisoformat(data["date_added"])
        if date_added.tzinfo is None:
            date_added = date_added.replace(tzinfo=timezone.utc)
        app_id = data.get("steam_app_id")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            location=str(data["location"]),
            extension=str(data["extension"]),
            platform=str(data.get("platform") or UNKNOWN_PLATFORM),
            size_bytes=int(data.get("size_bytes", 0)),
            date_added=date_added,
            steam_app_id=str(app_id) if app_id is not None else None,
        )
