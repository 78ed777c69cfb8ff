"""Terminal colors for repodep output.

Verdicts: green when satisfiable, red when not or on error. Repository
headers are blue, secondary details dim.
"""

import os
import sys

_RESET = '\033[0m'
_CODES = {
    'bold': '\033[1m',
    'dim': '\033[2m',
    'red': '\033[91m',
    'green': '\033[92m',
    'yellow': '\033[93m',
    'blue': '\033[94m',
}

_enabled = True


def init(nocolor: bool = False):
    """Turn colors off for --nocolor, $NO_COLOR or when stdout is not a terminal."""
    global _enabled
    _enabled = not (nocolor or os.environ.get('NO_COLOR') or not sys.stdout.isatty())


def _paint(text: str, code: str) -> str:
    if not _enabled:
        return text
    return f"{_CODES[code]}{text}{_RESET}"


def error(text: str) -> str:
    return _paint(text, 'red')


def warning(text: str) -> str:
    return _paint(text, 'yellow')


def success(text: str) -> str:
    return _paint(text, 'green')


def info(text: str) -> str:
    return _paint(text, 'blue')


def dim(text: str) -> str:
    return _paint(text, 'dim')


def bold(text: str) -> str:
    return _paint(text, 'bold')
