"""Shared fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture(scope="session")
def qapp():
    """One QCoreApplication for the whole session; Qt allows only one at a time."""
    QtCore = pytest.importorskip("PySide6.QtCore")
    return QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
