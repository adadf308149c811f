"""ROM scanner — walk configured directories and build catalog entries."""

from __future__ import annotations

import os
import stat
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping

from loguru import logger

from gameshelf.core.platform_registry import PlatformRegistry
from gameshelf.models.catalog_entry import CatalogEntry, entry_id_for_path
from gameshelf.utils import is_hidden


class RomScanner:
    """
    Directory source scanner.

    Every regular file under a root whose extension is claimed by some
    platform becomes one entry.  Hidden files and directories are skipped,
    and anything unreadable is skipped without aborting the pass.  Roots are
    walked concurrently; the result order is unspecified.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._max_workers = max(1, max_workers)

    def scan(
        self,
        directories: Iterable[str],
        registry: PlatformRegistry,
        overrides: Mapping[str, str] | None = None,
    ) -> list[CatalogEntry]:
        """Scan every root in *directories* and return all entries found."""
        roots = list(dict.fromkeys(directories))
        if not roots:
            return []

        extensions = registry.all_extensions()
        overrides = dict(overrides or {})
        entries: list[CatalogEntry] = []

        workers = min(self._max_workers, len(roots))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rom-scan") as pool:
            results = pool.map(
                lambda root: self.scan_directory(root, extensions, registry, overrides),
                roots,
            )
            for found in results:
                entries.extend(found)

        logger.info(f"ROM scan complete — {len(entries)} file(s) in {len(roots)} dir(s)")
        return entries

    def scan_directory(
        self,
        root: str,
        extensions: frozenset[str],
        registry: PlatformRegistry,
        overrides: Mapping[str, str],
    ) -> list[CatalogEntry]:
        """Walk a single root directory."""
        root_path = Path(root).expanduser().absolute()
        if not root_path.is_dir():
            logger.debug(f"ROM directory unavailable: {root_path}")
            return []

        entries: list[CatalogEntry] = []

        def _on_error(err: OSError) -> None:
            logger.debug(f"Skipping unreadable directory: {err}")

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_error):
            dirnames[:] = [d for d in dirnames if not is_hidden(d)]
            for filename in filenames:
                if is_hidden(filename):
                    continue
                ext = os.path.splitext(filename)[1].lower()
                if ext not in extensions:
                    continue
                entry = self._create_entry(Path(dirpath) / filename, ext, registry, overrides)
                if entry is not None:
                    entries.append(entry)

        logger.debug(f"{root_path}: {len(entries)} ROM(s)")
        return entries

    # ── Entry creation ──

    @staticmethod
    def _create_entry(
        file_path: Path,
        ext: str,
        registry: PlatformRegistry,
        overrides: Mapping[str, str],
    ) -> CatalogEntry | None:
        try:
            st = file_path.stat()
        except OSError as e:
            logger.debug(f"Cannot stat '{file_path}': {e}")
            return None
        if not stat.S_ISREG(st.st_mode):
            return None

        created = getattr(st, "st_birthtime", None) or st.st_ctime
        try:
            date_added = datetime.fromtimestamp(created, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            date_added = datetime.now(tz=timezone.utc)

        location = str(file_path)
        return CatalogEntry(
            id=entry_id_for_path(location),
            name=file_path.stem,
            location=location,
            extension=ext,
            platform=registry.resolve(location, ext, overrides),
            size_bytes=st.st_size,
            date_added=date_added,
        )
