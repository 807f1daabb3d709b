"""Arithmetic tools: expression evaluation and two-operand operations."""

import ast
import operator
import re
from typing import Any

# Only digits, the four operators, parentheses, decimal points and whitespace
EXPRESSION_PATTERN = re.compile(r"^[0-9+\-*/().\s]+$")

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _evaluate_node(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_node(node.left)
        right = _evaluate_node(node.right)
        if isinstance(node.op, ast.Div) and right == 0:
            raise ValueError("Division by zero")
        return _BINARY_OPERATORS[type(node.op)](left, right)

    raise ValueError("Invalid mathematical expression")


def evaluate_expression(expression: str) -> float:
    """Evaluate a basic arithmetic expression.

    Supports +, -, *, / and parentheses over integer and decimal literals.
    The expression is parsed with ``ast`` and only numeric nodes and the four
    operators are evaluated; nothing is ever executed.

    Raises:
        ValueError: If the expression is empty, contains disallowed characters,
            is malformed, or divides by zero.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ValueError("Expression is required")
    if not EXPRESSION_PATTERN.match(expression):
        raise ValueError("Invalid characters in expression")

    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Invalid mathematical expression: {e.msg}") from e

    return float(_evaluate_node(tree.body))


def _operand(arguments: dict[str, Any], key: str) -> float:
    value = arguments.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"Parameter '{key}' must be a number")
    return value


# ============ TOOL HANDLERS ============


def handle_calculator(arguments: dict[str, Any]) -> float:
    return evaluate_expression(arguments.get("expression", ""))


def handle_add(arguments: dict[str, Any]) -> float:
    return _operand(arguments, "a") + _operand(arguments, "b")


def handle_subtract(arguments: dict[str, Any]) -> float:
    return _operand(arguments, "a") - _operand(arguments, "b")


def handle_multiply(arguments: dict[str, Any]) -> float:
    return _operand(arguments, "a") * _operand(arguments, "b")


def handle_divide(arguments: dict[str, Any]) -> float:
    divisor = _operand(arguments, "b")
    if divisor == 0:
        raise ValueError("Cannot divide by zero")
    return _operand(arguments, "a") / divisor
