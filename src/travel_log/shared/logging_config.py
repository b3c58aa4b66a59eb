"""Logging configuration."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from travel_log.shared.config.settings import LoggingSettings


def setup_logging(settings: LoggingSettings, level: str | None = None) -> None:
    """Configure the root logger from settings.

    Console output goes through rich when ``console_colored`` is set.
    Calling this again after handlers are attached does nothing.

    Args:
        settings: Logging settings
        level: Optional level name overriding ``settings.level``
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, (level or settings.level).upper(), logging.INFO))

    if settings.console_enabled:
        if settings.console_colored:
            handler: logging.Handler = RichHandler(
                console=Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
            )
            handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(settings.format))
        root.addHandler(handler)

    if settings.file_enabled:
        log_path = Path(settings.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(settings.format))
        root.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
