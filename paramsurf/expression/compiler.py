"""Compile parsed expressions into reusable numeric callables.

The AST is turned once into a tree of closures; calling the result never
re-parses. All arithmetic goes through numpy ufuncs under
``np.errstate(all="ignore")`` so that division by zero, domain errors and
overflow yield inf/NaN (IEEE semantics) instead of raising. The same closure
tree evaluates scalars and whole parameter grids.
"""

import logging
import math
from functools import reduce
from typing import Callable

import numpy as np

from paramsurf.errors import CompileError, EmptyBound, EmptyExpression, NonFiniteBound
from paramsurf.expression.parser import BinaryOp, Call, Node, Number, UnaryOp, Variable, free_variables, parse

logger = logging.getLogger(__name__)

SURFACE_VARIABLES = ("u", "v")

Evaluator = Callable[[np.ndarray, np.ndarray], np.ndarray]


def _round_half_up(x):
    return np.floor(np.add(x, 0.5))


_UNARY_FUNCTIONS = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "exp": np.exp,
    "log": np.log,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "floor": np.floor,
    "ceil": np.ceil,
    "round": _round_half_up,
}

_BINARY_FUNCTIONS = {
    "pow": np.power,
    "min": np.minimum,
    "max": np.maximum,
}

_OPERATORS = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": np.power,
}


def _build(node: Node) -> Evaluator:
    """Recursively turn an AST node into a closure of (u, v)."""
    if isinstance(node, Number):
        value = np.float64(node.value)
        return lambda u, v: value

    if isinstance(node, Variable):
        if node.name == "u":
            return lambda u, v: u
        return lambda u, v: v

    if isinstance(node, UnaryOp):
        operand = _build(node.operand)
        if node.op == "-":
            return lambda u, v: np.negative(operand(u, v))
        return operand

    if isinstance(node, BinaryOp):
        op = _OPERATORS[node.op]
        left = _build(node.left)
        right = _build(node.right)
        return lambda u, v: op(left(u, v), right(u, v))

    if isinstance(node, Call):
        args = [_build(arg) for arg in node.args]
        if node.name in _UNARY_FUNCTIONS:
            fn = _UNARY_FUNCTIONS[node.name]
            (arg,) = args
            return lambda u, v: fn(arg(u, v))
        fn = _BINARY_FUNCTIONS[node.name]
        return lambda u, v: reduce(fn, [arg(u, v) for arg in args])

    raise TypeError(f"Unsupported expression node: {type(node).__name__}")


class CompiledExpression:
    """A validated expression of the free parameters ``u`` and ``v``.

    Example:
        f = compile_expression("cos(u) * cos(v)")
        f(0.0, 0.0)                 # 1.0
        f.evaluate(u_grid, v_grid)  # element-wise over arrays
    """

    def __init__(self, source: str, tree: Node):
        self.source = source
        self.tree = tree
        self.free_variables = frozenset(free_variables(tree))
        self._fn = _build(tree)

    def __call__(self, u: float = 0.0, v: float = 0.0) -> float:
        with np.errstate(all="ignore"):
            return float(self._fn(np.float64(u), np.float64(v)))

    def evaluate(self, u, v) -> np.ndarray:
        """Evaluate over arrays; the result has the broadcast shape of u and v."""
        u = np.asarray(u, dtype=np.float64)
        v = np.asarray(v, dtype=np.float64)
        shape = np.broadcast(u, v).shape
        with np.errstate(all="ignore"):
            result = self._fn(u, v)
        return np.broadcast_to(np.asarray(result, dtype=np.float64), shape)

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r})"


def compile_expression(text: str) -> CompiledExpression:
    """Compile a surface expression in ``u`` and ``v``.

    Raises EmptyExpression for blank text and CompileError for anything that
    fails to parse or raises during the smoke evaluation at u=0, v=0.
    """
    if text is None or not text.strip():
        raise EmptyExpression()

    source = text.strip()
    try:
        compiled = CompiledExpression(source, parse(source, SURFACE_VARIABLES))
        compiled(0.0, 0.0)
    except Exception as e:
        logger.debug("Rejected expression %r: %s", source, e)
        raise CompileError(source, str(e)) from e
    return compiled


def eval_scalar(text: str) -> float:
    """Evaluate a constant expression such as ``2 * pi`` or ``-1.5``."""
    if text is None or not text.strip():
        raise EmptyBound()

    source = text.strip()
    try:
        tree = parse(source, variables=())
        with np.errstate(all="ignore"):
            value = float(_build(tree)(np.float64(0.0), np.float64(0.0)))
    except Exception as e:
        raise CompileError(text, str(e), message=f'Could not parse bound "{text}": {e}') from e

    if not math.isfinite(value):
        raise NonFiniteBound(text)
    return value
