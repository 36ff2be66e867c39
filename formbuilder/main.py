"""Entry point for the form builder application."""

from __future__ import annotations

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from formbuilder.config import get_settings
from formbuilder.logging_config import configure_logging
from formbuilder.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="formbuilder", description="Compose and fill forms.")
    parser.add_argument("path", nargs="?", help="form definition JSON file to open")
    parser.add_argument(
        "--preview",
        action="store_true",
        help="open the definition for data collection only",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.preview and not args.path:
        logger.error("--preview needs a definition file")
        return 2

    app = QApplication.instance() or QApplication(sys.argv[:1])
    window = MainWindow(settings=settings)
    if args.path and not window.open_definition(args.path) and args.preview:
        return 1
    if args.preview:
        window.enter_preview_mode()
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
