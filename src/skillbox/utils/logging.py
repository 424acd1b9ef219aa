"""Logging configuration for skillbox."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from skillbox.utils.config import Config

LOGGER_NAME = "skillbox"
LOG_FILENAME = "skillbox.log"


def setup_logging(config: Config, console_output: bool = False) -> None:
    """
    Set up logging for skillbox.

    The file log under ``config.logging_path`` always records DEBUG; the
    console (server mode) shows ``config.log_level`` and above. Calling this
    again replaces the handlers installed by an earlier call.

    Args:
        config: Application configuration
        console_output: Whether to output logs to console (default: False)
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        if getattr(handler, "_skillbox", False):
            logger.removeHandler(handler)
            handler.close()

    config.logging_path.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.logging_path / LOG_FILENAME, maxBytes=1_000_000, backupCount=3
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    file_handler.setLevel(logging.DEBUG)
    _install(logger, file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        # No timestamp on the console
        console_handler.setFormatter(
            logging.Formatter("%(levelname)s - %(name)s - %(message)s")
        )
        console_handler.setLevel(config.log_level)
        _install(logger, console_handler)


def _install(logger: logging.Logger, handler: logging.Handler) -> None:
    handler._skillbox = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
