"""Tests for the Steam manifest scanner."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from gameshelf.core.steam_scanner import SteamScanner, is_denylisted


def _manifest(app_id: str, name: str, installdir: str = "", size: str = "",
              last_updated: str = "") -> str:
    lines = ['"AppState"', "{", f'\t"appid"\t\t"{app_id}"', f'\t"name"\t\t"{name}"']
    if installdir:
        lines.append(f'\t"installdir"\t\t"{installdir}"')
    if size:
        lines.append(f'\t"SizeOnDisk"\t\t"{size}"')
    if last_updated:
        lines.append(f'\t"LastUpdated"\t\t"{last_updated}"')
    lines.append("}")
    return "\n".join(lines) + "\n"


def _write_manifest(steamapps: Path, app_id: str, name: str, **kwargs: str) -> Path:
    steamapps.mkdir(parents=True, exist_ok=True)
    path = steamapps / f"appmanifest_{app_id}.acf"
    path.write_text(_manifest(app_id, name, **kwargs), encoding="utf-8")
    return path


@pytest.fixture
def steam_root(tmp_path: Path) -> Path:
    root = tmp_path / "Steam"
    (root / "steamapps").mkdir(parents=True)
    return root


@pytest.fixture
def scanner(steam_root: Path) -> SteamScanner:
    return SteamScanner(steam_root, app_path=steam_root)


class TestDenylist:
    @pytest.mark.parametrize("name", [
        "Steamworks Common Redistributables",
        "Proton 8.0",
        "Steam Linux Runtime - Soldier",
        "Source SDK Base 2013",
        "Counter-Strike Dedicated Server",
    ])
    def test_tools_are_denylisted(self, name: str) -> None:
        assert is_denylisted(name)

    def test_games_pass(self) -> None:
        assert not is_denylisted("Portal 2")


class TestParseManifest:
    def test_full_manifest(self, scanner: SteamScanner, steam_root: Path) -> None:
        path = _write_manifest(steam_root / "steamapps", "620", "Portal 2",
                               installdir="Portal 2", size="12345", last_updated="1600000000")
        entry = scanner.parse_app_manifest(path)
        assert entry is not None
        assert entry.id == "steam_620"
        assert entry.steam_app_id == "620"
        assert entry.platform == "Steam"
        assert entry.extension == ".steam"
        assert entry.size_bytes == 12345
        assert entry.location == str(steam_root / "steamapps" / "common" / "Portal 2")
        assert entry.date_added == datetime.fromtimestamp(1600000000, tz=timezone.utc)

    def test_missing_name_skipped(self, scanner: SteamScanner, steam_root: Path) -> None:
        path = steam_root / "steamapps" / "appmanifest_1.acf"
        path.write_text('"AppState"\n{\n\t"appid"\t\t"1"\n}\n', encoding="utf-8")
        assert scanner.parse_app_manifest(path) is None

    def test_non_numeric_appid_skipped(self, scanner: SteamScanner, steam_root: Path) -> None:
        path = _write_manifest(steam_root / "steamapps", "abc", "Broken")
        assert scanner.parse_app_manifest(path) is None

    def test_malformed_file_skipped(self, scanner: SteamScanner, steam_root: Path) -> None:
        path = steam_root / "steamapps" / "appmanifest_9.acf"
        path.write_text('"AppState"\n{\n\t"appid"\t\t"9"\n', encoding="utf-8")
        assert scanner.parse_app_manifest(path) is None

    def test_denylisted_name_produces_nothing(self, scanner, steam_root: Path) -> None:
        path = _write_manifest(steam_root / "steamapps", "228980", "SDK Tools Redistributable")
        assert scanner.parse_app_manifest(path) is None

    def test_bad_optional_fields_default(self, scanner, steam_root: Path) -> None:
        path = _write_manifest(steam_root / "steamapps", "70", "Half-Life",
                               size="lots", last_updated="never")
        entry = scanner.parse_app_manifest(path)
        assert entry is not None
        assert entry.size_bytes == 0


class TestLibraryFolders:
    def test_default_only(self, scanner: SteamScanner, steam_root: Path) -> None:
        assert scanner.library_folders() == [steam_root]

    def test_extra_libraries(self, scanner, steam_root: Path, tmp_path: Path) -> None:
        extra = tmp_path / "ExtDrive" / "SteamLibrary"
        (steam_root / "steamapps" / "libraryfolders.vdf").write_text(
            '"libraryfolders"\n{\n'
            f'\t"0"\n\t{{\n\t\t"path"\t\t"{steam_root.as_posix()}"\n\t}}\n'
            f'\t"1"\n\t{{\n\t\t"path"\t\t"{extra.as_posix()}"\n\t\t"label"\t\t""\n\t}}\n'
            "}\n",
            encoding="utf-8",
        )
        folders = scanner.library_folders()
        assert folders[0] == steam_root
        assert Path(extra.as_posix()) in folders
        assert len(folders) == 2

    def test_legacy_layout(self, scanner, steam_root: Path, tmp_path: Path) -> None:
        extra = tmp_path / "Old"
        (steam_root / "steamapps" / "libraryfolders.vdf").write_text(
            '"LibraryFolders"\n{\n\t"TimeNextStatsReport"\t\t"1234"\n'
            f'\t"1"\t\t"{extra.as_posix()}"\n}}\n',
            encoding="utf-8",
        )
        assert Path(extra.as_posix()) in scanner.library_folders()

    def test_malformed_file(self, scanner, steam_root: Path) -> None:
        (steam_root / "steamapps" / "libraryfolders.vdf").write_text(
            '"libraryfolders"\n{\n\t"0"\n\t{\n', encoding="utf-8"
        )
        assert scanner.library_folders() == [steam_root]


class TestScan:
    def test_scans_all_libraries(self, scanner, steam_root: Path, tmp_path: Path) -> None:
        extra = tmp_path / "SteamLibrary"
        (steam_root / "steamapps" / "libraryfolders.vdf").write_text(
            f'"libraryfolders"\n{{\n\t"1"\n\t{{\n\t\t"path"\t\t"{extra.as_posix()}"\n\t}}\n}}\n',
            encoding="utf-8",
        )
        _write_manifest(steam_root / "steamapps", "620", "Portal 2", installdir="Portal 2")
        _write_manifest(extra / "steamapps", "70", "Half-Life", installdir="Half-Life")
        _write_manifest(extra / "steamapps", "1070560", "Steam Linux Runtime")
        entries = scanner.scan()
        assert sorted(e.id for e in entries) == ["steam_620", "steam_70"]

    def test_missing_steam(self, tmp_path: Path) -> None:
        scanner = SteamScanner(tmp_path / "nope", app_path=tmp_path / "nope")
        assert not scanner.is_installed
        assert scanner.scan() == []

    def test_is_installed_follows_app_path(self, steam_root: Path, tmp_path: Path) -> None:
        app = tmp_path / "Steam.app"
        scanner = SteamScanner(steam_root, app_path=app)
        assert not scanner.is_installed
        app.mkdir()
        assert scanner.is_installed
