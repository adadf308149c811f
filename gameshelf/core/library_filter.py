"""Catalog queries — platform filter, text search and sort orders."""

from __future__ import annotations

import locale
from enum import StrEnum
from typing import Iterable

from gameshelf.models.catalog_entry import CatalogEntry


class SortOption(StrEnum):
    NAME = "name"
    PLATFORM = "platform"
    DATE_ADDED = "date_added"
    SIZE = "size"


def name_sort_key(entry: CatalogEntry) -> str:
    """Case-insensitive, locale-aware key for catalog names."""
    folded = entry.name.casefold()
    try:
        return locale.strxfrm(folded)
    except (OSError, ValueError):
        # Undecodable or NUL-containing names the C library cannot collate
        return folded


def sort_catalog(entries: Iterable[CatalogEntry]) -> list[CatalogEntry]:
    """Stable sort by name; the catalog's canonical order."""
    return sorted(entries, key=name_sort_key)


def platforms_in(entries: Iterable[CatalogEntry]) -> list[str]:
    return sorted({e.platform for e in entries})


def filter_catalog(
    entries: Iterable[CatalogEntry],
    platform: str | None = None,
    search: str = "",
    sort: SortOption = SortOption.NAME,
) -> list[CatalogEntry]:
    """
    Narrow and reorder a catalog for display.

    *search* matches case-insensitively against name or platform.  Sorting
    by date puts the newest first and by size the largest first.
    """
    result = list(entries)

    if platform:
        result = [e for e in result if e.platform == platform]

    needle = search.strip().casefold()
    if needle:
        result = [
            e for e in result
            if needle in e.name.casefold() or needle in e.platform.casefold()
        ]

    if sort == SortOption.NAME:
        result.sort(key=name_sort_key)
    elif sort == SortOption.PLATFORM:
        result.sort(key=lambda e: e.platform)
    elif sort == SortOption.DATE_ADDED:
        result.sort(key=lambda e: e.date_added, reverse=True)
    elif sort == SortOption.SIZE:
        result.sort(key=lambda e: e.size_bytes, reverse=True)

    return result
