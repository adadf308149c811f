"""Platform model and the built-in platform table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

UNKNOWN_PLATFORM = "Unknown"


def normalize_extension(ext: str) -> str:
    """Lowercase *ext* and make sure it carries a leading dot."""
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


@dataclass(frozen=True)
class Platform:
    """Classification target — a platform and the file extensions it claims."""

    name: str
    extensions: tuple[str, ...] = field(default_factory=tuple)
    color: str = "#888888"
    icon: str = "gamecontroller"

    def __post_init__(self) -> None:
        normalized = tuple(normalize_extension(e) for e in self.extensions if e.strip())
        object.__setattr__(self, "extensions", normalized)

    def claims(self, ext: str) -> bool:
        return normalize_extension(ext) in self.extensions

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "extensions": list(self.extensions),
            "color": self.color,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Platform:
        extensions: Iterable[str] = data.get("extensions") or ()
        return cls(
            name=str(data["name"]),
            extensions=tuple(extensions),
            color=data.get("color", "#888888"),
            icon=data.get("icon", "gamecontroller"),
        )


# Declaration order matters: the first platform claiming an extension wins.
# ".iso" is shared by Wii / PlayStation 2 / PSP and ".cue" / ".chd" by
# PlayStation / Sega Saturn; per-file overrides settle those.
BUILT_IN_PLATFORMS: tuple[Platform, ...] = (
    Platform("NES", (".nes", ".nez"), "#E60012"),
    Platform("SNES", (".sfc", ".smc"), "#7B5AA6"),
    Platform("Game Boy", (".gb",), "#8B956D"),
    Platform("Game Boy Color", (".gbc",), "#6B4D9F"),
    Platform("Game Boy Advance", (".gba",), "#5A5EB9"),
    Platform("Nintendo 64", (".n64", ".z64", ".v64"), "#009E60"),
    Platform("GameCube", (".gcm", ".gcz"), "#6A5ACD"),
    Platform("Wii", (".wbfs", ".wad", ".nkit", ".iso", ".wia", ".rvz"), "#00A1E0"),
    Platform("Nintendo DS", (".nds",), "#CCCCCC"),
    Platform("Nintendo 3DS", (".3ds", ".cia"), "#D12228"),
    Platform("Nintendo Switch", (".nsp", ".xci"), "#E60012"),
    Platform("PlayStation", (".bin", ".cue", ".chd"), "#003087"),
    Platform("PlayStation 2", (".iso",), "#003087"),
    Platform("PSP", (".cso", ".iso"), "#000000"),
    Platform("Sega Genesis", (".md", ".gen"), "#17569B"),
    Platform("Sega Master System", (".sms",), "#17569B"),
    Platform("Game Gear", (".gg",), "#000000"),
    Platform("Sega Saturn", (".cue", ".chd"), "#000000"),
    Platform("Dreamcast", (".cdi", ".gdi"), "#FF6600"),
)
