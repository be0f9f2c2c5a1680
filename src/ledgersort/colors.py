"""
ANSI color codes for terminal output.
"""

import os
import sys


def _supports_color():
    """Check whether stdout is a terminal that understands ANSI codes."""
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    return hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()


class C:
    """Color codes, empty strings when color is unsupported."""
    _enabled = _supports_color()

    RESET = '\033[0m' if _enabled else ''
    BOLD = '\033[1m' if _enabled else ''
    DIM = '\033[2m' if _enabled else ''
    RED = '\033[31m' if _enabled else ''
    GREEN = '\033[32m' if _enabled else ''
    YELLOW = '\033[33m' if _enabled else ''
    BLUE = '\033[34m' if _enabled else ''
    CYAN = '\033[36m' if _enabled else ''
