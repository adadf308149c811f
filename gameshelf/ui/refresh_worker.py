"""Background library refresh for Qt front ends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger
from PySide6.QtCore import QThread, Signal

if TYPE_CHECKING:
    from gameshelf.context import AppContext


class RefreshWorker(QThread):
    """
    Runs ``LibraryManager.refresh`` off the GUI thread.

    Settings are snapshotted in the constructor, i.e. on the thread that owns
    the config, so the scan never reads configuration concurrently with edits.
    """

    cached_ready = Signal(object)  # list[CatalogEntry], cold-cache display
    refreshed = Signal(object)  # list[CatalogEntry]

    def __init__(self, ctx: AppContext, parent=None) -> None:
        super().__init__(parent)
        self._ctx = ctx
        self._settings = ctx.config.scan_settings()

    def run(self) -> None:
        manager = self._ctx.library_manager
        try:
            catalog = manager.refresh(self._settings, on_cached=self.cached_ready.emit)
        except Exception as e:
            logger.error(f"Library refresh failed: {e}")
            catalog = manager.catalog
        self.refreshed.emit(catalog)
