"""Main application window for YogaPlan.

Tab-based shell around the session player.
"""
from __future__ import annotations

import logging

from PyQt6.QtCore import QSettings
from PyQt6.QtWidgets import QMainWindow, QStatusBar, QTabWidget

from .. import __app_name__, __version__
from .session_player_tab import SessionPlayerTab


class MainWindow(QMainWindow):
    """Main window: player tab, status bar, persisted geometry."""

    def __init__(self, library):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.settings = QSettings(__app_name__, "MainWindow")
        self.library = library

        self._setup_ui()
        self._restore_window_state()
        self.logger.info(f"[ui] {__app_name__} {__version__} window ready")

    def _setup_ui(self):
        self.setWindowTitle(f"{__app_name__} {__version__}")
        self.setMinimumSize(900, 700)

        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        self.player_tab = SessionPlayerTab(self.library, parent=self)
        self.tabs.addTab(self.player_tab, "🧘 Session")

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready")

        self.player_tab.session_started.connect(lambda: self.status_bar.showMessage("Playing"))
        self.player_tab.session_paused.connect(lambda: self.status_bar.showMessage("Paused"))
        self.player_tab.session_completed.connect(lambda: self.status_bar.showMessage("Session complete"))

    def _restore_window_state(self):
        geometry = self.settings.value("geometry")
        if geometry:
            self.restoreGeometry(geometry)

    def _save_window_state(self):
        self.settings.setValue("geometry", self.saveGeometry())

    def closeEvent(self, event):
        self._save_window_state()
        self.player_tab.shutdown()
        event.accept()
