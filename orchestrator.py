# orchestrator.py
from __future__ import annotations

from typing import Tuple

from logging_utils import log_calculation
from math_parser import CalculationError, calculate
from session_memory import get_calculation_history
from terminal_ui import format_number


def calculator_turn(raw_user_input: str) -> Tuple[str, bool]:
    """
    Single REPL turn: evaluate, record in history, log.

    Returns (answer_text, ok). Calculation errors become the answer text;
    anything else propagates.
    """
    text = (raw_user_input or "").strip()
    if not text:
        return "I didn’t receive an expression to calculate.", False

    try:
        result = calculate(text)
    except CalculationError as e:
        log_calculation(text, error=e.message, code=e.error_code, source="cli")
        return f"Error [{e.error_code}]: {e.message}", False

    get_calculation_history().add(text, result)
    log_calculation(text, result=result, source="cli")
    return f"{text} = {format_number(result)}", True
