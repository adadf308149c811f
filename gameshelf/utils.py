"""Shared utility functions."""

from __future__ import annotations

import locale

from loguru import logger


def format_size(size_bytes: int) -> str:
    """Format byte count to human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"


def is_hidden(name: str) -> bool:
    """Dot-prefixed names are hidden on every platform we scan."""
    return name.startswith(".")


def init_locale() -> bool:
    """Adopt the user's locale so name sorting follows their collation rules."""
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as e:
        logger.warning(f"Could not set the user locale, sorting by code point: {e}")
        return False
    logger.debug(f"Collation locale: {locale.setlocale(locale.LC_COLLATE)}")
    return True
