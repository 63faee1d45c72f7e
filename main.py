"""VTOL VR Localization Builder: language JSON <-> localization CSV.

Launch with: python main.py
"""

import logging
import sys
from PyQt6.QtWidgets import QApplication
from vtol_polyglot.widgets.main_window import MainWindow


def main():
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setApplicationName("VTOL VR Localization Builder")
    app.setStyle("Fusion")

    window = MainWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
