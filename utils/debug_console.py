"""Debug console that mirrors Rich console output into the debug log.

Status output stays formatted in the terminal while a plain-text copy is
written to the debug log, so a log file shows what the user saw.
"""

import io
import logging
import re
from typing import Optional
from rich.console import Console as RichConsole

DEBUG_LOGGER_NAME = "gdocs_sync.console"

# ANSI escape sequence pattern
ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class DebugCapturingConsole(RichConsole):
    """
    Rich Console that also logs a plain-text copy of everything it prints.
    """

    def __init__(self, debug_logger: Optional[logging.Logger] = None, *args, **kwargs):
        """
        Args:
            debug_logger: Logger that receives the captured output
            *args, **kwargs: Arguments passed to Rich Console
        """
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        super().print(*objects, **kwargs)

        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            plain_text = self.render_plain(*objects, **kwargs)
            if plain_text.strip():
                self.debug_logger.debug(f"{self._log_prefix}{plain_text}")

    def render_plain(self, *objects, **kwargs) -> str:
        """
        Render objects the way ``print`` would, without markup or colour.

        Returns:
            Plain text with trailing whitespace removed
        """
        buffer = io.StringIO()
        plain_console = RichConsole(
            file=buffer,
            force_terminal=False,
            no_color=True,
            width=self.width,
            legacy_windows=False,
        )
        plain_console.print(*objects, **kwargs)
        return ANSI_ESCAPE.sub('', buffer.getvalue()).rstrip()


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None) -> RichConsole:
    """Capturing console when debug logging has somewhere to go, plain console otherwise"""
    if not (debug_enabled and debug_logger):
        return RichConsole()
    return DebugCapturingConsole(debug_logger=debug_logger)


def setup_debug_logger(log_file: str) -> logging.Logger:
    """
    Attach ``log_file`` to the console capture logger.

    The logger does not propagate, so captured output is written once and
    never reaches the stderr handler. Calling this again replaces the file.

    Args:
        log_file: Debug log path, appended to

    Returns:
        The console capture logger
    """
    capture_logger = logging.getLogger(DEBUG_LOGGER_NAME)
    capture_logger.setLevel(logging.DEBUG)
    capture_logger.propagate = False

    for old in list(capture_logger.handlers):
        capture_logger.removeHandler(old)
        old.close()

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
    capture_logger.addHandler(handler)
    return capture_logger
