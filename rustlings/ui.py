"""Terminal styling and the warning/success message helpers."""

from __future__ import annotations

import os
import sys

_RED = "31"
_GREEN = "32"
_BLUE = "34"
_BOLD = "1"


def no_emoji() -> bool:
    """Whether the user asked for output without emoji."""
    return "NO_EMOJI" in os.environ


def _colors_enabled() -> bool:
    force = os.environ.get("CLICOLOR_FORCE")
    if force is not None and force != "0":
        return True
    if os.environ.get("CLICOLOR") == "0":
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _style(text: object, code: str) -> str:
    text = str(text)
    if not _colors_enabled():
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def emoji(symbol: str, fallback: str) -> str:
    """Return ``symbol`` if standard output can encode it, else ``fallback``."""
    encoding = getattr(sys.stdout, "encoding", None) or "utf-8"
    try:
        symbol.encode(encoding)
    except (UnicodeEncodeError, LookupError):
        return fallback
    return symbol


def red(text: object) -> str:
    return _style(text, _RED)


def green(text: object) -> str:
    return _style(text, _GREEN)


def blue(text: object) -> str:
    return _style(text, _BLUE)


def bold(text: object) -> str:
    return _style(text, _BOLD)


def warn(message: str) -> None:
    """Print a warning line in red."""
    marker = "!" if no_emoji() else emoji("⚠️ ", "!")
    print(f"{red(marker)} {red(message)}")


def success(message: str) -> None:
    """Print a success line in green."""
    marker = "✓" if no_emoji() else emoji("✅", "✓")
    print(f"{green(marker)} {green(message)}")