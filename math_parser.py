# math_parser.py
"""
Arithmetic expression evaluator.

Supports: numbers (with an optional decimal point), +, -, *, / and
parentheses. No eval(): the expression goes through four stages

    validate -> tokenize -> infix_to_postfix -> evaluate_postfix

and any failure raises CalculationError with a stable message and an
ErrorKind the HTTP layer turns into a machine-readable code.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorKind(Enum):
    INVALID_CHARACTER = "invalid_character"
    INVALID_NUMBER_FORMAT = "invalid_number_format"
    MISMATCHED_PARENTHESES = "mismatched_parentheses"
    INSUFFICIENT_OPERANDS = "insufficient_operands"
    TOO_MANY_OPERANDS = "too_many_operands"
    DIVISION_BY_ZERO = "division_by_zero"
    INVALID_RESULT = "invalid_result"
    EMPTY_EXPRESSION = "empty_expression"

    @property
    def error_code(self) -> str:
        """Code reported to API clients for this kind of failure."""
        return _ERROR_CODES[self]


_ERROR_CODES = {
    ErrorKind.INVALID_CHARACTER: "INVALID_CHARACTER",
    ErrorKind.INVALID_NUMBER_FORMAT: "CALCULATION_ERROR",
    ErrorKind.MISMATCHED_PARENTHESES: "MISMATCHED_PARENTHESES",
    ErrorKind.INSUFFICIENT_OPERANDS: "INVALID_EXPRESSION_FORMAT",
    ErrorKind.TOO_MANY_OPERANDS: "INVALID_EXPRESSION_FORMAT",
    ErrorKind.DIVISION_BY_ZERO: "DIVISION_BY_ZERO",
    ErrorKind.INVALID_RESULT: "CALCULATION_ERROR",
    ErrorKind.EMPTY_EXPRESSION: "CALCULATION_ERROR",
}


class CalculationError(Exception):
    """Raised when an expression is invalid or cannot be evaluated."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def error_code(self) -> str:
        return self.kind.error_code


# ---------------------------------------------------------------------------
# Operators & tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OperatorSpec:
    precedence: int
    associativity: str  # "left" or "right"


OPERATORS: Mapping[str, OperatorSpec] = MappingProxyType({
    "+": OperatorSpec(precedence=1, associativity="left"),
    "-": OperatorSpec(precedence=1, associativity="left"),
    "*": OperatorSpec(precedence=2, associativity="left"),
    "/": OperatorSpec(precedence=2, associativity="left"),
})


class TokenType(Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Optional[float] = None
    symbol: Optional[str] = None

    @classmethod
    def number(cls, value: float) -> "Token":
        return cls(TokenType.NUMBER, value=value)

    @classmethod
    def operator(cls, symbol: str) -> "Token":
        return cls(TokenType.OPERATOR, symbol=symbol)

    def __str__(self) -> str:
        if self.type is TokenType.NUMBER:
            return repr(self.value)
        if self.type is TokenType.OPERATOR:
            return self.symbol or ""
        return "(" if self.type is TokenType.LEFT_PAREN else ")"


LEFT_PAREN = Token(TokenType.LEFT_PAREN)
RIGHT_PAREN = Token(TokenType.RIGHT_PAREN)


# ---------------------------------------------------------------------------
# Stage 1: validation
# ---------------------------------------------------------------------------

_ALLOWED_CHARS = re.compile(r"^[0-9+\-*/().\s]+$")
# `**` would be read as two multiplications; reject it as a power operator.
_POWER_OPERATOR = re.compile(r"\*\s*\*")
_NUMBER_FORMAT = re.compile(r"^(?:\d+\.?\d*|\.\d+)$")


def is_valid_expression(expression: str) -> bool:
    """Whole-string character check, no positions reported."""
    if not _ALLOWED_CHARS.match(expression):
        return False
    return _POWER_OPERATOR.search(expression) is None


def is_valid_number(buffer: str) -> bool:
    """At most one decimal point and at least one digit: 4, 4., .4, 4.25."""
    return _NUMBER_FORMAT.match(buffer) is not None


# ---------------------------------------------------------------------------
# Stage 2: tokenizer
# ---------------------------------------------------------------------------


def _flush_number(buffer: str, tokens: List[Token]) -> None:
    if not buffer:
        return
    if not is_valid_number(buffer):
        raise CalculationError(
            ErrorKind.INVALID_NUMBER_FORMAT, f"Invalid number format: {buffer}"
        )
    tokens.append(Token.number(float(buffer)))


def tokenize(expression: str) -> List[Token]:
    """
    Split an expression into number, operator and parenthesis tokens.

    Consecutive digits and decimal points form one number; whitespace,
    operators and parentheses end it.
    """
    tokens: List[Token] = []
    buffer = ""

    for ch in expression:
        if ch.isspace():
            _flush_number(buffer, tokens)
            buffer = ""
        elif "0" <= ch <= "9" or ch == ".":
            buffer += ch
        elif ch in OPERATORS:
            _flush_number(buffer, tokens)
            buffer = ""
            tokens.append(Token.operator(ch))
        elif ch in "()":
            _flush_number(buffer, tokens)
            buffer = ""
            tokens.append(LEFT_PAREN if ch == "(" else RIGHT_PAREN)
        else:
            raise CalculationError(
                ErrorKind.INVALID_CHARACTER, f"Invalid character: {ch}"
            )

    _flush_number(buffer, tokens)
    return tokens


# ---------------------------------------------------------------------------
# Stage 3: shunting-yard
# ---------------------------------------------------------------------------


def _mismatched() -> CalculationError:
    return CalculationError(ErrorKind.MISMATCHED_PARENTHESES, "Mismatched parentheses")


def infix_to_postfix(tokens: List[Token]) -> List[Token]:
    """Reorder infix tokens into reverse-Polish order."""
    output: List[Token] = []
    stack: List[Token] = []

    for token in tokens:
        if token.type is TokenType.NUMBER:
            output.append(token)
        elif token.type is TokenType.LEFT_PAREN:
            stack.append(token)
        elif token.type is TokenType.RIGHT_PAREN:
            while stack and stack[-1].type is not TokenType.LEFT_PAREN:
                output.append(stack.pop())
            if not stack:
                raise _mismatched()
            stack.pop()
        else:
            o1 = OPERATORS[token.symbol]
            while stack and stack[-1].type is TokenType.OPERATOR:
                o2 = OPERATORS[stack[-1].symbol]
                if o2.precedence > o1.precedence or (
                    o2.precedence == o1.precedence and o1.associativity == "left"
                ):
                    output.append(stack.pop())
                else:
                    break
            stack.append(token)

    while stack:
        token = stack.pop()
        if token.type is not TokenType.OPERATOR:
            raise _mismatched()
        output.append(token)

    return output


# ---------------------------------------------------------------------------
# Stage 4: postfix evaluation
# ---------------------------------------------------------------------------


def _apply(symbol: str, a: float, b: float) -> float:
    if symbol == "+":
        return a + b
    if symbol == "-":
        return a - b
    if symbol == "*":
        return a * b
    if b == 0:
        raise CalculationError(
            ErrorKind.DIVISION_BY_ZERO, "Division by zero is not allowed"
        )
    return a / b


def evaluate_postfix(postfix: List[Token]) -> float:
    stack: List[float] = []

    for token in postfix:
        if token.type is TokenType.NUMBER:
            stack.append(token.value)
            continue

        if len(stack) < 2:
            raise CalculationError(
                ErrorKind.INSUFFICIENT_OPERANDS,
                "Invalid expression: insufficient operands",
            )
        b = stack.pop()
        a = stack.pop()
        stack.append(_apply(token.symbol, a, b))

    if len(stack) != 1:
        raise CalculationError(
            ErrorKind.TOO_MANY_OPERANDS, "Invalid expression: too many operands"
        )
    return stack[0]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def calculate(expression: str) -> float:
    """
    Evaluate an arithmetic expression and return a finite float.

    Raises:
        CalculationError: on the first failing stage; nothing is retried.
    """
    if not isinstance(expression, str) or not expression:
        raise CalculationError(
            ErrorKind.EMPTY_EXPRESSION, "Expression must be a non-empty string"
        )

    if not expression.strip():
        raise CalculationError(ErrorKind.EMPTY_EXPRESSION, "Expression cannot be empty")

    if not is_valid_expression(expression):
        raise CalculationError(
            ErrorKind.INVALID_CHARACTER, "Expression contains invalid characters"
        )

    tokens = tokenize(expression)
    if not tokens:
        raise CalculationError(
            ErrorKind.EMPTY_EXPRESSION, "No valid tokens found in expression"
        )

    result = evaluate_postfix(infix_to_postfix(tokens))

    if not math.isfinite(result):
        raise CalculationError(
            ErrorKind.INVALID_RESULT, "Calculation resulted in an invalid number"
        )
    return result
