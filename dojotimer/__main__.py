"""Allow running DojoTimer as a module: python -m dojotimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import DojoTimerApp


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    init_db()

    app = QApplication(sys.argv)
    app.setApplicationName("DojoTimer")
    app.setOrganizationName("DojoTimer")

    window = DojoTimerApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
