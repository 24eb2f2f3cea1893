# terminal_ui.py

from __future__ import annotations

import textwrap

# Basic ANSI colors
RESET = "\033[0m"
FG_WHITE = "\033[97m"
FG_GREEN = "\033[92m"
FG_RED = "\033[91m"


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{RESET}"


def format_number(value: float, decimals: int = 8) -> str:
    """
    Round to `decimals` places and drop trailing zeros: 4.0 -> "4",
    0.1 + 0.2 -> "0.3".
    """
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        text = "0"
    return text


def print_banner(title: str, subtitle: str | None = None, color: str = FG_WHITE, width: int = 60) -> None:
    if width < 20:
        width = 20

    top = "╔" + "═" * (width - 2) + "╗"
    bottom = "╚" + "═" * (width - 2) + "╝"

    print(_colorize(top, color))
    print(_colorize(f"║{title.center(width - 2)}║", color))
    if subtitle:
        print(_colorize(f"║{subtitle.center(width - 2)}║", color))
    print(_colorize(bottom, color))


def print_box(title: str, content: str, color: str = FG_WHITE, width: int = 60) -> None:
    """
    Content box with a title bar and wrapped text, e.g. the `!history` list.
    """
    if width < 30:
        width = 30

    top = "┌" + "─" * (width - 2) + "┐"
    title_row = "│" + f" {title} ".center(width - 2) + "│"
    sep = "├" + "─" * (width - 2) + "┤"
    bottom = "└" + "─" * (width - 2) + "┘"

    print(_colorize(top, color))
    print(_colorize(title_row, color))
    print(_colorize(sep, color))

    body_lines: list[str] = []
    for raw_line in (content or "").splitlines() or [""]:
        wrapped = textwrap.wrap(raw_line, width=width - 4, break_long_words=True)
        body_lines.extend(wrapped or [""])

    for text in body_lines:
        print(_colorize(f"│ {text.ljust(width - 4)} │", color))

    print(_colorize(bottom, color))
