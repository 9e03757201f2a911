# src/session_client/logging_setup.py

import sys
import logging
from pathlib import Path
from typing import Optional, Union

import colorlog

from .utils.paths import get_logs_dir

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SessionClientDebugFilter(logging.Filter):
    """Lets only DEBUG records from the session_client logger through."""

    def filter(self, record):
        return record.levelno == logging.DEBUG and record.name.startswith(
            "session_client"
        )


def configure_logging(
    root: Optional[Union[Path, str]] = None,
    console_level: int = logging.INFO,
    log_to_files: bool = True,
) -> None:
    """
    Configure logging for applications embedding the session client.

    - console: colored, ``console_level`` and above
    - logs/session_client.log: INFO and above from every logger
    - logs/session_client_debug.log: DEBUG records from session_client only

    Calling it again replaces the handlers it installed earlier.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_session_client_handler", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )
    handlers = [console_handler]

    if log_to_files:
        log_dir = get_logs_dir(root)

        info_file_handler = logging.FileHandler(
            log_dir / "session_client.log", encoding="utf-8"
        )
        info_file_handler.setLevel(logging.INFO)
        info_file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(info_file_handler)

        debug_file_handler = logging.FileHandler(
            log_dir / "session_client_debug.log", encoding="utf-8"
        )
        debug_file_handler.setLevel(logging.DEBUG)
        debug_file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        debug_file_handler.addFilter(SessionClientDebugFilter())
        handlers.append(debug_file_handler)

    root_logger.setLevel(logging.DEBUG)
    for handler in handlers:
        handler._session_client_handler = True
        root_logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
