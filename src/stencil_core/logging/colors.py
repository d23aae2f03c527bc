"""ANSI color codes for terminal log output.

All colors use the 256-color palette for better compatibility and consistency.

Usage:
    from stencil_core.logging.colors import LEVEL_COLORS, RESET

    print(f"{LEVEL_COLORS['ERROR']}render failed{RESET}")
"""

# Basic colors
RESET = "\033[0m"

# Level colors
RED = "\033[38;5;196m"  # bright red
YELLOW = "\033[38;5;226m"  # bright yellow
LIGHT_BLUE = "\033[38;5;153m"  # light blue
GREY = "\033[38;5;245m"  # mid grey

# Component names
CYAN = "\033[38;5;51m"

LEVEL_COLORS = {
    "DEBUG": GREY,
    "INFO": LIGHT_BLUE,
    "WARNING": YELLOW,
    "ERROR": RED,
    "CRITICAL": RED,
}

__all__ = [
    "RESET",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "GREY",
    "CYAN",
    "LEVEL_COLORS",
]
