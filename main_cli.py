# main_cli.py
from __future__ import annotations

import sys

from dotenv import load_dotenv

from logging_utils import configure_logging
from orchestrator import calculator_turn
from session_memory import get_calculation_history
from terminal_ui import (
    print_banner,
    print_box,
    FG_GREEN,
    FG_RED,
    FG_WHITE,
)


def main() -> None:
    # Ensure UTF-8 console
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except AttributeError:
        pass

    load_dotenv()
    configure_logging("WARNING")

    print_banner("MATH CALCULATOR", "+ - * / ( ) and decimals", color=FG_WHITE)

    history = get_calculation_history()

    try:
        while True:
            print("\nType an expression (or 'exit' to quit).")
            print("Special commands: !history (recent results), !clear (forget history)")
            raw_input_text = input("calc > ").strip()

            if not raw_input_text:
                continue

            lowered = raw_input_text.lower()
            if lowered in {"exit", "quit", "q"}:
                print("Exiting...")
                break

            if lowered in {"!history", "/history"}:
                print_box("History", history.build_history_block() or "(empty)", color=FG_WHITE)
                continue

            if lowered in {"!clear", "/clear"}:
                history.clear()
                print("History cleared.")
                continue

            answer, ok = calculator_turn(raw_input_text)
            print_box("Result" if ok else "Error", answer, color=FG_GREEN if ok else FG_RED)

    except (KeyboardInterrupt, EOFError):
        print("\nInterrupted by user. Exiting...")


if __name__ == "__main__":
    main()
