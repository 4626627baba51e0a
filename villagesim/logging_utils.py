"""Tagged console output for verbose runs.

Each line carries a color-blind friendly tag so bookkeeping (aging,
succession) reads apart from random outcomes (deaths, matches, births).
Set VILLAGESIM_NO_COLOR to drop the ANSI codes, e.g. when piping to a file.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Deterministic bookkeeping
    YELLOW = "\033[93m"    # Stochastic outcomes
    RED = "\033[91m"       # Skipped pairings, listener failures
    GREEN = "\033[92m"     # Year and run completion
    CYAN = "\033[96m"      # Setup and run metadata
    RESET = "\033[0m"


LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_STOCHASTIC = "[~]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"


def colored(text: str, color: Color) -> str:
    """Wrap text in color codes unless VILLAGESIM_NO_COLOR is set."""
    if os.getenv("VILLAGESIM_NO_COLOR"):
        return text
    return f"{color.value}{text}{Color.RESET.value}"


def _emit(tag: str, color: Color, message: str) -> None:
    print(colored(f"{tag} {message}", color))


def log_deterministic(message: str) -> None:
    _emit(LOG_TAG_DETERMINISTIC, Color.BLUE, message)


def log_stochastic(message: str) -> None:
    _emit(LOG_TAG_STOCHASTIC, Color.YELLOW, message)


def log_error(message: str) -> None:
    _emit(LOG_TAG_ERROR, Color.RED, message)


def log_success(message: str) -> None:
    _emit(LOG_TAG_SUCCESS, Color.GREEN, message)


def log_info(message: str) -> None:
    _emit(LOG_TAG_INFO, Color.CYAN, message)
