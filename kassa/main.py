"""Entry point for the kassa Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from kassa.config import AppConfig
from kassa.context import AppContext
from kassa.receipt_app import KassaApp


def configure_logging(log_path: Path) -> None:
    """Send logs to a debug file; the terminal belongs to the UI."""
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.INFO)


def main() -> None:
    """Run the Textual application."""
    config = AppConfig()
    configure_logging(config.debug_log_path)
    context = AppContext.create(config)
    try:
        KassaApp(context).run()
    finally:
        context.close()


if __name__ == "__main__":
    main()
