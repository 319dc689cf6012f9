"""Debug utilities for controlling debug output across the app.

Provides a centralized way to handle debug messages, supporting both quiet mode
(logging only) and loud mode (print to stdout).
"""

import logging
import os

DEBUG_MODE_ENV = "TYPING_PRACTICE_DEBUG_MODE"


class DebugUtil:
    """Manage debug output based on debug mode setting.

    Supports two modes:
    - "quiet": Debug messages are logged only
    - "loud": Debug messages are printed to stdout
    """

    def __init__(self, mode: str | None = None) -> None:
        """Initialize the debug mode.

        An explicit ``mode`` wins; otherwise the TYPING_PRACTICE_DEBUG_MODE
        environment variable is read. Defaults to "quiet" if not set or invalid.
        """
        env_mode = (mode or os.environ.get(DEBUG_MODE_ENV, "quiet")).lower()
        self._mode = env_mode if env_mode in ["quiet", "loud"] else "quiet"
        self._logger = logging.getLogger(self.__class__.__name__)

    def debug_mode(self) -> str:
        """Get the current debug mode ("quiet" or "loud")."""
        return self._mode

    def debugMessage(self, *args: object) -> None:
        """Output a debug message based on the current debug mode.

        In "quiet" mode: Messages are logged using the logger.
        In "loud" mode: Messages are printed to stdout using print().
        """
        if self._mode == "loud":
            print("[DEBUG]", *args, flush=True)
        else:
            message = " ".join(str(arg) for arg in args)
            if message:
                self._logger.debug(message)

    def set_mode(self, mode: str) -> None:
        """Change the debug mode. Invalid values default to "quiet"."""
        self._mode = mode.lower() if mode.lower() in ["quiet", "loud"] else "quiet"

    def is_loud(self) -> bool:
        """Check if debug mode is set to loud."""
        return self._mode == "loud"

    def is_quiet(self) -> bool:
        """Check if debug mode is set to quiet."""
        return self._mode == "quiet"
