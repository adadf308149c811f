"""Application entry point — wires services and refreshes the game library."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from PySide6.QtCore import QCoreApplication

from gameshelf.config import Config, get_config
from gameshelf.context import AppContext
from gameshelf.core.availability import AvailabilityChecker
from gameshelf.core.library_manager import LibraryManager
from gameshelf.core.rom_scanner import RomScanner
from gameshelf.core.steam_scanner import SteamScanner
from gameshelf.data.library_cache import LibraryCache
from gameshelf.logger import setup_logger
from gameshelf.models.catalog_entry import CatalogEntry
from gameshelf.ui.refresh_worker import RefreshWorker
from gameshelf.utils import init_locale


def create_context(config: Config | None = None) -> AppContext:
    """Wire all services and return an AppContext."""
    config = config or get_config()

    # Logger
    setup_logger(config.data_dir / "logs")

    # Sources
    rom_scanner = RomScanner()
    steam_scanner = SteamScanner(config.steam_path)

    # Catalog
    library_cache = LibraryCache(config.data_dir)
    library_manager = LibraryManager(config, library_cache, rom_scanner, steam_scanner)
    availability = AvailabilityChecker(steam_scanner)

    return AppContext(
        config=config,
        rom_scanner=rom_scanner,
        steam_scanner=steam_scanner,
        library_cache=library_cache,
        library_manager=library_manager,
        availability=availability,
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gameshelf",
        description="Scan ROM directories and Steam into a cached game library.",
    )
    parser.add_argument("--data-dir", type=Path, help="Config / cache directory")
    parser.add_argument("--add-dir", action="append", default=[], metavar="DIR",
                        help="Add a ROM directory (repeatable)")
    parser.add_argument("--override", nargs=2, action="append", default=[],
                        metavar=("PATH", "PLATFORM"), help="Pin a file to a platform")
    parser.add_argument("--no-steam", action="store_true", help="Skip the Steam library")
    parser.add_argument("--clear-cache", action="store_true",
                        help="Forget every cached entry before scanning")
    parser.add_argument("--list", action="store_true", help="Print the catalog")
    return parser.parse_args(argv)


def _print_catalog(ctx: AppContext, catalog: list[CatalogEntry]) -> None:
    for entry in catalog:
        flag = " " if ctx.availability.is_available(entry) else "!"
        print(f"{flag} {entry.platform:<20} {entry.display_name:<50} {entry.formatted_size:>10}")
    print(
        f"{len(catalog)} title(s), "
        f"{ctx.availability.unavailable_count(catalog)} unavailable"
    )


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    args = _parse_args(argv)
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("GameShelf")

    config = Config(args.data_dir) if args.data_dir else get_config()
    with config.batch_update():
        for directory in args.add_dir:
            config.add_rom_directory(str(Path(directory).expanduser().absolute()))
        for path, platform in args.override:
            config.set_platform_override(platform, str(Path(path).expanduser().absolute()))
        if args.no_steam:
            config.include_steam_games = False

    ctx = create_context(config)
    init_locale()
    if args.clear_cache:
        ctx.library_manager.clear_cache()

    worker = RefreshWorker(ctx)
    result: list[CatalogEntry] = []

    worker.cached_ready.connect(
        lambda catalog: logger.info(f"Showing {len(catalog)} cached title(s) while scanning")
    )
    worker.refreshed.connect(result.extend)
    # Queued to this thread, so it is delivered once exec() is running
    worker.finished.connect(app.quit)
    worker.start()
    app.exec()
    worker.wait()

    if args.list:
        _print_catalog(ctx, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
