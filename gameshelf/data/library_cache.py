"""Library cache — JSON snapshot of the last known catalog."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from gameshelf.models.catalog_entry import CatalogEntry

CACHE_VERSION = 1


@dataclass(frozen=True)
class CacheInfo:
    count: int
    last_modified: datetime | None


class LibraryCache:
    """
    Catalog snapshot store — reads/writes library_cache.json.

    Holds exactly one snapshot, replaced wholesale on every save.  Neither
    ``load`` nor ``save`` raises: a missing or corrupt file loads as an empty
    catalog and a failed write is only logged.
    """

    FILE_NAME = "library_cache.json"

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._path = data_dir / self.FILE_NAME
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[CatalogEntry]:
        """Load the cached catalog; empty on any failure."""
        if not self._path.exists():
            logger.debug("No library cache found")
            return []
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Failed to load library cache: {e}")
            return []

        records = self._records(data)
        if records is None:
            return []

        entries: list[CatalogEntry] = []
        for record in records:
            try:
                entries.append(CatalogEntry.from_dict(record))
            except (TypeError, KeyError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed cache entry: {e}")
        logger.info(f"Loaded {len(entries)} entries from library cache")
        return entries

    @staticmethod
    def _records(data: Any) -> list[Any] | None:
        # Early snapshots were a bare list of entries.
        if isinstance(data, list):
            return data
        if not isinstance(data, dict):
            logger.error("Library cache has an unexpected layout, ignoring it")
            return None
        version = data.get("version")
        if version != CACHE_VERSION:
            logger.warning(f"Unsupported library cache version {version!r}, ignoring it")
            return None
        records = data.get("entries", [])
        if not isinstance(records, list):
            logger.error("Library cache 'entries' is not a list, ignoring it")
            return None
        return records

    def save(self, entries: Iterable[CatalogEntry]) -> None:
        """Atomically replace the snapshot with *entries*."""
        entries = list(entries)
        data = {
            "version": CACHE_VERSION,
            "saved_at": datetime.now(tz=timezone.utc).isoformat(),
            "entries": [entry.to_dict() for entry in entries],
        }
        with self._write_lock:
            tmp_name: str | None = None
            try:
                self._data_dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=".library_cache.", suffix=".tmp", dir=self._data_dir
                )
                # ASCII escapes keep surrogate-escaped path characters intact
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=True, indent=2)
                os.replace(tmp_name, self._path)
                tmp_name = None
                logger.info(f"Saved {len(entries)} entries to library cache")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to save library cache: {e}")
            finally:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

    def clear(self) -> None:
        """Remove the snapshot entirely."""
        with self._write_lock:
            try:
                self._path.unlink(missing_ok=True)
                logger.info("Library cache cleared")
            except OSError as e:
                logger.error(f"Failed to clear library cache: {e}")

    def info(self) -> CacheInfo:
        if not self._path.exists():
            return CacheInfo(0, None)
        try:
            mtime = datetime.fromtimestamp(self._path.stat().st_mtime, tz=timezone.utc)
        except OSError:
            mtime = None
        return CacheInfo(len(self.load()), mtime)
