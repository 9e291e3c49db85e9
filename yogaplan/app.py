import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from . import __app_name__, __version__
from .logging_utils import setup_logging
from .storage.library import CardLibrary
from .ui.main_window import MainWindow


def run(library=None):
    # Ensure logging is configured when launching GUI directly
    log_mode_env = os.environ.get("YOGAPLAN_LOG_MODE")
    debug_mode = os.environ.get("YOGAPLAN_DEBUG", "0") in ("1", "true", "True", "yes")
    log_level = "DEBUG" if debug_mode else "WARNING"
    if not logging.getLogger().handlers:
        setup_logging(level=log_level, add_console=True, log_mode=log_mode_env)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(__app_name__)
    app.setApplicationVersion(__version__)

    if library is None:
        library = CardLibrary()
    library.initialize_defaults()

    win = MainWindow(library)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(run())
