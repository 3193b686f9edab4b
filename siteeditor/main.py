import argparse
import logging
import sys
from pathlib import Path

from PyQt6 import QtWidgets

from .core.logs import configure_logging
from .ui.main_window import MainWindow

if sys.platform == "win32":
    try:
        import ctypes
        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(
            "SiteEditor.App")
    except (AttributeError, OSError):
        pass


def main() -> int:
    parser = argparse.ArgumentParser(description="Edit a site in place.")
    parser.add_argument("site", nargs="?", type=Path, help="site document (.json) to open")
    parser.add_argument("--debug", action="store_true", help="log at DEBUG level")
    args, qt_args = parser.parse_known_args()

    configure_logging(logging.DEBUG if args.debug else logging.INFO)
    app = QtWidgets.QApplication([sys.argv[0], *qt_args])
    win = MainWindow(site_path=args.site)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
