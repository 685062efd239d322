"""Logging and console setup for CLI"""

import logging
import os
from rich.console import Console

from utils.debug_console import create_debug_console, setup_debug_logger

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level: str, debug: bool = False, log_file: str = "gdocs_sync_debug.log") -> None:
    """
    Configure the root logger

    Without debug, records at LOG_LEVEL and above go to stderr.
    With debug, everything is logged to stderr and appended to ``log_file``.

    Args:
        log_level: Level name from configuration
        debug: Whether debug mode is enabled
        log_file: Debug log path
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    if debug:
        root_logger.setLevel(logging.DEBUG)
        file_handler = logging.FileHandler(os.path.abspath(log_file), mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        level = logging.DEBUG
    else:
        level = logging.getLevelName(str(log_level).upper())
        if not isinstance(level, int):
            level = logging.WARNING
        root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def setup_debug_console(debug: bool, log_file: str = "gdocs_sync_debug.log") -> Console:
    """
    Setup console based on debug mode

    Args:
        debug: Whether debug mode is enabled
        log_file: Debug log path shared with the root logger

    Returns:
        Console instance (either regular or debug-capturing)
    """
    if not debug:
        return Console()

    debug_logger = setup_debug_logger(os.path.abspath(log_file))
    console = create_debug_console(debug_enabled=True, debug_logger=debug_logger)
    debug_logger.debug("[CLI] ===== CLI SESSION STARTED =====")
    return console
