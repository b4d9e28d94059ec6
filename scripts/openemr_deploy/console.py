"""Coloured status lines shared by both deploy entry points.

Every line carries a bracketed tag so the output stays greppable when colours
are disabled (set NO_COLOR to turn them off). Warnings and errors go to
stderr.
"""

from __future__ import annotations

import logging
import os
import sys

RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
NC = "\033[0m"

ENV_NO_COLOR = "NO_COLOR"

logger = logging.getLogger("openemr_deploy")


def colors_enabled() -> bool:
    return not os.getenv(ENV_NO_COLOR)


def paint(text: str, color: str) -> str:
    if not colors_enabled():
        return text
    return f"{color}{text}{NC}"


def print_status(message: str) -> None:
    print(f"{paint('[INFO]', BLUE)} {message}")


def print_success(message: str) -> None:
    print(f"{paint('[SUCCESS]', GREEN)} {message}")


def print_warning(message: str) -> None:
    print(f"{paint('[WARNING]', YELLOW)} {message}", file=sys.stderr)


def print_error(message: str) -> None:
    print(f"{paint('[ERROR]', RED)} {message}", file=sys.stderr)


def print_field(label: str, value: object, *, color: str = YELLOW, width: int = 0) -> None:
    """Print an indented `label: value` line, padding the label to `width`."""
    heading = f"{label}:".ljust(width) if width else f"{label}:"
    print(f"  {paint(heading, color)} {value}")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
    )
