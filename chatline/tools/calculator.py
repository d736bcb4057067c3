"""Arithmetic evaluation restricted to a whitelist of AST nodes."""

from __future__ import annotations

import ast
import math
import operator
from typing import Any, Callable, Dict, Union

Number = Union[int, float]

_BINARY_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS: Dict[str, Callable[..., Number]] = {
    "sqrt": math.sqrt,
    "log": math.log,
    "ln": math.log,
    "log10": math.log10,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "abs": abs,
    "round": round,
}

_CONSTANTS: Dict[str, float] = {"pi": math.pi, "e": math.e}

# Integer results wider than this are refused. Big-int arithmetic runs in C
# and cannot be interrupted by a signal, so "(9**9999)**9999" must never start.
MAX_RESULT_BITS = 10_000


def _check_power(base: Number, exponent: Number) -> None:
    if not (isinstance(base, int) and isinstance(exponent, int)):
        return
    if abs(base) <= 1 or exponent <= 0:
        return
    if exponent * math.log2(abs(base)) > MAX_RESULT_BITS:
        raise ValueError(f"Result too large: power with exponent {exponent}")


def _check_result(value: Any) -> Number:
    if isinstance(value, complex):
        raise ValueError("Result is not a real number")
    if isinstance(value, int) and value.bit_length() > MAX_RESULT_BITS:
        raise ValueError("Result too large")
    return value


class SafeCalculator:
    """Evaluate arithmetic expressions without ``eval``."""

    def evaluate(self, expression: str) -> Number:
        tree = ast.parse(expression.strip(), mode="eval")
        return self._visit(tree.body)

    def _visit(self, node: ast.AST) -> Number:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
                raise ValueError(f"Unsupported constant: {node.value!r}")
            return _check_result(node.value)

        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
            left = self._visit(node.left)
            right = self._visit(node.right)
            if isinstance(node.op, ast.Pow):
                _check_power(left, right)
            return _check_result(_BINARY_OPS[type(node.op)](left, right))

        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
            return _UNARY_OPS[type(node.op)](self._visit(node.operand))

        if isinstance(node, ast.Name):
            if node.id in _CONSTANTS:
                return _CONSTANTS[node.id]
            raise ValueError(f"Unknown name: {node.id}")

        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
                raise ValueError("Only simple math functions may be called")
            if node.keywords:
                raise ValueError("Keyword arguments are not supported")
            args = [self._visit(arg) for arg in node.args]
            return _check_result(_FUNCTIONS[node.func.id](*args))

        raise ValueError(f"Disallowed expression: {type(node).__name__}")


def _normalize(value: Number) -> Number:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def calculate(expression: str) -> Dict[str, Any]:
    """Evaluate an arithmetic expression such as "2+2" or "sqrt(16) * pi".

    Args:
        expression: Math expression using numbers, + - * / // % **,
            parentheses, sqrt, log, ln, log10, sin, cos, tan, abs, round,
            pi and e.

    Returns:
        Dict with keys success, expression and result, or success and error.
    """
    if not expression or not str(expression).strip():
        return {"success": False, "error": "Expression is required for calculator."}

    try:
        value = SafeCalculator().evaluate(str(expression))
    except ZeroDivisionError:
        return {"success": False, "expression": expression, "error": "Division by zero"}
    except (SyntaxError, ValueError, TypeError, OverflowError) as e:
        return {"success": False, "expression": expression, "error": str(e)}

    return {"success": True, "expression": expression, "result": _normalize(value)}
