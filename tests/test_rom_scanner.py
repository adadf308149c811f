"""Tests for the ROM directory scanner."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from gameshelf.core.platform_registry import PlatformRegistry
from gameshelf.core.rom_scanner import RomScanner
from gameshelf.models.catalog_entry import entry_id_for_path


@pytest.fixture
def scanner() -> RomScanner:
    return RomScanner()


@pytest.fixture
def registry() -> PlatformRegistry:
    return PlatformRegistry()


@pytest.fixture
def rom_tree(tmp_path: Path) -> Path:
    """A small ROM tree with nested, hidden and unrelated files."""
    root = tmp_path / "games"
    (root / "snes").mkdir(parents=True)
    (root / "snes" / "Chrono Trigger (USA).sfc").write_bytes(b"\x00" * 64)
    (root / "nes").mkdir()
    (root / "nes" / "Zelda.NES").write_bytes(b"NES\x1a")
    (root / "disc.iso").write_bytes(b"iso")
    (root / "notes.txt").write_text("not a rom")
    (root / ".hidden.gba").write_bytes(b"gba")
    (root / ".cache").mkdir()
    (root / ".cache" / "inside.gb").write_bytes(b"gb")
    return root


def _by_name(entries):
    return {e.name: e for e in entries}


class TestRomScanner:
    def test_finds_recognized_files(self, scanner, registry, rom_tree: Path) -> None:
        entries = scanner.scan([str(rom_tree)], registry)
        assert set(_by_name(entries)) == {"Chrono Trigger (USA)", "Zelda", "disc"}

    def test_skips_hidden_files_and_dirs(self, scanner, registry, rom_tree: Path) -> None:
        names = _by_name(scanner.scan([str(rom_tree)], registry))
        assert ".hidden" not in names
        assert "inside" not in names

    def test_entry_fields(self, scanner, registry, rom_tree: Path) -> None:
        entry = _by_name(scanner.scan([str(rom_tree)], registry))["Chrono Trigger (USA)"]
        expected = rom_tree / "snes" / "Chrono Trigger (USA).sfc"
        assert entry.platform == "SNES"
        assert entry.location == str(expected)
        assert entry.extension == ".sfc"
        assert entry.size_bytes == 64
        assert entry.id == entry_id_for_path(str(expected))
        assert entry.steam_app_id is None

    def test_extension_lowercased(self, scanner, registry, rom_tree: Path) -> None:
        entry = _by_name(scanner.scan([str(rom_tree)], registry))["Zelda"]
        assert entry.extension == ".nes"
        assert entry.platform == "NES"

    def test_ambiguous_extension_defaults_to_first(self, scanner, registry, rom_tree) -> None:
        entry = _by_name(scanner.scan([str(rom_tree)], registry))["disc"]
        assert entry.platform == "Wii"

    def test_override_applies(self, scanner, registry, rom_tree: Path) -> None:
        overrides = {str(rom_tree / "disc.iso"): "PlayStation 2"}
        entry = _by_name(scanner.scan([str(rom_tree)], registry, overrides))["disc"]
        assert entry.platform == "PlayStation 2"

    def test_idempotent(self, scanner, registry, rom_tree: Path) -> None:
        first = {(e.id, e.platform) for e in scanner.scan([str(rom_tree)], registry)}
        second = {(e.id, e.platform) for e in scanner.scan([str(rom_tree)], registry)}
        assert first == second

    def test_missing_root_is_skipped(self, scanner, registry, rom_tree, tmp_path) -> None:
        entries = scanner.scan([str(tmp_path / "unplugged"), str(rom_tree)], registry)
        assert len(entries) == 3

    def test_no_roots(self, scanner, registry) -> None:
        assert scanner.scan([], registry) == []

    def test_multiple_roots(self, scanner, registry, tmp_path: Path) -> None:
        for i in range(3):
            d = tmp_path / f"root{i}"
            d.mkdir()
            (d / f"game{i}.gb").write_bytes(b"gb")
        roots = [str(tmp_path / f"root{i}") for i in range(3)]
        entries = scanner.scan(roots, registry)
        assert sorted(e.name for e in entries) == ["game0", "game1", "game2"]

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0,
                        reason="permission bits not enforced")
    def test_unreadable_subdir_does_not_abort(self, scanner, registry, rom_tree) -> None:
        locked = rom_tree / "locked"
        locked.mkdir()
        (locked / "secret.gb").write_bytes(b"gb")
        locked.chmod(0)
        try:
            names = _by_name(scanner.scan([str(rom_tree)], registry))
        finally:
            locked.chmod(0o755)
        assert "secret" not in names
        assert "Zelda" in names
