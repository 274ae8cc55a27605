"""GUI entry point for the File Favorites application."""

import locale
import logging
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from .services.document_storage import FavoritesError
from .services.favorite_store import FavoriteStore
from .ui.main_window import FavoritesWindow
from .utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main():
    """Launch the GUI application."""
    setup_logging()
    # Sort labels the way the user's locale expects
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("Could not set collation locale: %s", e)

    app = QApplication(sys.argv)
    app.setApplicationName("File Favorites")

    store = FavoriteStore.from_data_dir()
    try:
        store.load()
    except FavoritesError as e:
        logger.error("Could not load favorites: %s", e)
        QMessageBox.critical(
            None,
            "Could Not Load Favorites",
            f"{e}\n\nFix or remove {store.storage_path} and reload.",
        )

    window = FavoritesWindow(store)
    window.show()

    # Files handed over by "Open in New Window"
    paths = store.load_restoration_point()
    if paths:
        logger.info("Reopening %d files from the restoration point", len(paths))
        window.open_paths(paths)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
