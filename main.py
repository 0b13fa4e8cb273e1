# main.py
from __future__ import annotations
import argparse
import sys
import logging

from PySide6.QtWidgets import QApplication, QMessageBox

from app.config import load_config
from app.errors import TypingEngineError
from ui.main_window import MainWindow
from utils.file_handler import ChunkSize, load_default_text, load_inception, load_practice_text


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("app.log", encoding="utf-8"),
        ],
    )

    # Log any uncaught exceptions rather than silently dying
    def excepthook(exctype, value, tb):
        logging.exception("Unhandled exception", exc_info=(exctype, value, tb))
        try:
            QMessageBox.critical(
                None, "Application Error", f"{exctype.__name__}: {value}"
            )
        except Exception:
            pass
        # exit with non-zero so run scripts don’t think it succeeded
        sys.exit(1)

    sys.excepthook = excepthook


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="typedrill", description="Typing practice with enforced corrections and analytics")
    src = p.add_mutually_exclusive_group()
    src.add_argument("-f", "--file", help="file to take the practice text from")
    src.add_argument("--inception", action="store_true", help="practice on the typing engine's own source")
    p.add_argument("-s", "--size", choices=[c.value for c in ChunkSize], default=ChunkSize.MEDIUM.value,
                   help="size of the practice snippet (default: medium)")
    p.add_argument("-t", "--threshold", type=int, default=None,
                   help="characters allowed after an uncorrected error before input freezes")
    p.add_argument("-c", "--config", default=None, help="JSON settings file (default: ./settings.json if present)")
    p.add_argument("-v", "--verbose", action="store_true", help="log every classification")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    size = ChunkSize(args.size)

    try:
        config = load_config(args.config).with_overrides(freeze_threshold=args.threshold)
        if args.inception:
            title, text = "typing_engine.py (inception)", load_inception(size)
        elif args.file:
            title, text = args.file, load_practice_text(args.file, size)
        else:
            title, text = "Built-in text", load_default_text()
    except TypingEngineError as e:
        logging.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("Typedrill")
    app.setOrganizationName("Typedrill")

    win = MainWindow(config, text, title=title, size=size)
    win.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
