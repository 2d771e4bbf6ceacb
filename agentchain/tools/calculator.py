"""
Calculator Tool
===============

Evaluates arithmetic expressions for agents that solve math problems.

The expression is parsed with the ast module and walked node by node.
Only numbers, arithmetic operators, a fixed set of constants and a fixed
set of math functions are accepted; anything else (names, attributes,
subscripts, lambdas, ...) is rejected before evaluation.

Supported syntax:
    2 + 2, 3.14 * 5, (10 + 5) * 2, -3 % 2
    2 ^ 10 and 2 ** 10 (power)
    pi, e
    sqrt(16), abs(-2), exp(1), ln(e), log(100) (base 10), log10(100)
    sin, cos, tan, asin, acos, atan, sinh, cosh, tanh
    floor, ceil, round, min, max
"""

import ast
import asyncio
import math
import operator
from typing import Callable

from pydantic import BaseModel, Field

from agentchain.tools import Tool


class CalculatorError(ValueError):
    """The expression is not something the calculator evaluates."""


class CalculateArgs(BaseModel):
    """Arguments for the calculate tool."""
    expression: str = Field(
        description="A mathematical expression to evaluate (e.g., '2 + 2', '3.14 * 5')"
    )


_BINARY_OPS: dict[type, Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    # math.pow raises OverflowError instead of building huge integers
    ast.Pow: math.pow,
}

_UNARY_OPS: dict[type, Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

_FUNCTIONS: dict[str, Callable[..., float]] = {
    "sqrt": math.sqrt,
    "abs": abs,
    "exp": math.exp,
    "ln": math.log,
    "log": math.log10,
    "log10": math.log10,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "floor": math.floor,
    "ceil": math.ceil,
    "round": round,
    "min": min,
    "max": max,
}


def _evaluate(node: ast.AST) -> float:
    # All arithmetic is done on floats, so every operation is bounded
    if isinstance(node, ast.Expression):
        return _evaluate(node.body)

    if isinstance(node, ast.Constant):
        # bool is an int subclass; True + 1 is not arithmetic input
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return float(node.value)
        raise CalculatorError(f"Unsupported literal: {node.value!r}")

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise CalculatorError(f"Unsupported operator: {type(node.op).__name__}")
        return op(_evaluate(node.left), _evaluate(node.right))

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise CalculatorError(f"Unsupported operator: {type(node.op).__name__}")
        return op(_evaluate(node.operand))

    if isinstance(node, ast.Name):
        if node.id in _CONSTANTS:
            return _CONSTANTS[node.id]
        raise CalculatorError(f"Unknown variable: {node.id}")

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
            raise CalculatorError("Only the built-in math functions can be called")
        if node.keywords:
            raise CalculatorError("Keyword arguments are not supported")
        args = [_evaluate(arg) for arg in node.args]
        return float(_FUNCTIONS[node.func.id](*args))

    raise CalculatorError(f"Unsupported expression element: {type(node).__name__}")


def format_number(value: float) -> str:
    """
    Render a result the way a person would write it.

    Integral values drop the decimal point ("4", not "4.0").
    """
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return str(value)
        if value.is_integer():
            return str(int(value))
    return str(value)


def evaluate_expression(expression: str) -> str:
    """
    Evaluate an arithmetic expression and return the formatted result.

    Raises:
        CalculatorError: If the expression is empty or uses unsupported syntax
        ZeroDivisionError, OverflowError, ValueError: For math errors
    """
    source = expression.strip().replace("^", "**")
    if not source:
        raise CalculatorError("Expression is empty")

    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        raise CalculatorError(f"Invalid expression: {expression!r}") from e

    return format_number(_evaluate(tree))


class CalculateTool(Tool):
    """Evaluates a mathematical expression and returns the result."""

    name = "calculate_tool"
    description = "Evaluates a mathematical expression and returns the result"
    args_model = CalculateArgs
    parameters = {
        "type": "object",
        "properties": {
            "expression": {
                "type": "string",
                "description": "A mathematical expression to evaluate (e.g., '2 + 2', '3.14 * 5')"
            }
        },
        "required": ["expression"]
    }

    async def call(self, args: CalculateArgs) -> str:
        return await asyncio.to_thread(evaluate_expression, args.expression)
