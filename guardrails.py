# guardrails.py
"""
Request-level checks that run before an expression reaches the evaluator.

The evaluator defends itself against empty input too; these checks exist so
that API clients get specific codes (missing body field, wrong type, too long).
"""

from __future__ import annotations

from typing import Any

from config import config


class RequestValidationError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def validate_math_input(expression: Any, max_length: int | None = None) -> str:
    """
    Check the raw `expression` field of a calculate request.

    Returns the expression unchanged when it is acceptable.
    """
    if max_length is None:
        max_length = config.validation.max_expression_length

    if not expression:
        raise RequestValidationError(
            "MISSING_EXPRESSION", "Math expression is required in request body."
        )

    if not isinstance(expression, str):
        raise RequestValidationError(
            "INVALID_EXPRESSION_TYPE", "Expression must be a string."
        )

    if not expression.strip():
        raise RequestValidationError("EMPTY_EXPRESSION", "Expression cannot be empty.")

    if len(expression) > max_length:
        raise RequestValidationError(
            "EXPRESSION_TOO_LONG",
            f"Expression is too long (max {max_length} characters).",
        )

    return expression
