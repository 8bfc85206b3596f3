"""
Trend scoring formulas.

A formula is a small arithmetic expression over the hit metrics of a
candidate trend line, for example::

    hits.candlesAbove / (hits.candlesBelow + 1) - 2 * v

Parsing uses Python's ``ast`` module with a strict node whitelist. NO
EVAL(): evaluation is a pure tree walk over the parsed expression.

Supported:
- Binary operators: + - * / ** and ``^`` (power)
- Unary operators: - +
- Numeric constants
- Functions: abs, min, max, sqrt, log, exp
- Metric identifiers: full names (``bounceUp``), abbreviations (``bu``),
  both optionally prefixed with ``hits.``, plus ``slopePercent``,
  ``length``/``l``, ``priceDeviation.p25th/.p50th/.p75th``,
  ``linePointsBase``, ``linePointsWeight`` and ``trendsAccumulated``

Division by zero evaluates to NaN. Unknown identifiers raise FormulaError
at parse time.
"""

from __future__ import annotations

import ast
import functools
from typing import Callable, Dict, FrozenSet, Mapping, Set, Type, Union

import numpy as np

from ..exceptions import FormulaError

Value = Union[float, np.ndarray]

# Hit metrics addressable as ``name``, ``abbr``, ``hits.name`` or ``hits.abbr``
HIT_METRICS: Dict[str, tuple[str, str]] = {
    "violations": ("v", "violations"),
    "bounceDown": ("bd", "bounce_down"),
    "bounceUp": ("bu", "bounce_up"),
    "bounceDownCandles": ("bdc", "bounce_down_candles"),
    "bounceUpCandles": ("buc", "bounce_up_candles"),
    "bounceDownStrict": ("bds", "bounce_down_strict"),
    "bounceUpStrict": ("bus", "bounce_up_strict"),
    "bounceDownStrictCandles": ("bdsc", "bounce_down_strict_candles"),
    "bounceUpStrictCandles": ("busc", "bounce_up_strict_candles"),
    "peaksDown": ("pd", "peaks_down"),
    "peaksUp": ("pu", "peaks_up"),
    "number": ("n", "number"),
    "percent": ("pc", "percent"),
    "candlesAbove": ("ca", "candles_above"),
    "candlesBelow": ("cb", "candles_below"),
    "maxConfirmationDistance": ("mcd", "max_confirmation_distance"),
}

# Line-level metrics addressable without the ``hits.`` prefix
LINE_METRICS: Dict[str, str] = {
    "slopePercent": "slope_percent",
    "length": "length",
    "l": "length",
    "priceDeviation.p25th": "price_deviation_p25",
    "priceDeviation.p50th": "price_deviation_p50",
    "priceDeviation.p75th": "price_deviation_p75",
    "linePointsBase": "line_points_base",
    "linePointsWeight": "line_points_weight",
    "trendsAccumulated": "trends_accumulated",
    # Spellings accepted by older scripts
    "slopePecent": "slope_percent",
    "hits.maxConfirmatioinDistance": "max_confirmation_distance",
}


def _build_identifier_table() -> Dict[str, str]:
    table: Dict[str, str] = {}
    for name, (abbr, canonical) in HIT_METRICS.items():
        for alias in (name, abbr, canonical):
            table[alias] = canonical
            table[f"hits.{alias}"] = canonical
    table.update(LINE_METRICS)
    for canonical in set(LINE_METRICS.values()):
        table.setdefault(canonical, canonical)
    return table


IDENTIFIERS: Dict[str, str] = _build_identifier_table()

METRIC_NAMES: FrozenSet[str] = frozenset(IDENTIFIERS.values())


def _safe_divide(left: Value, right: Value) -> Value:
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.divide(left, right)
    return np.where(np.asarray(right) == 0, np.nan, result)


def _power(left: Value, right: Value) -> Value:
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return np.power(np.asarray(left, dtype=np.float64), right)


def _unary_math(func: Callable[[np.ndarray], np.ndarray]) -> Callable[..., Value]:
    def apply(value: Value) -> Value:
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return func(np.asarray(value, dtype=np.float64))
    return apply


FUNCTIONS: Dict[str, tuple[Callable[..., Value], int, int]] = {
    # name: (implementation, min args, max args)
    "abs": (np.abs, 1, 1),
    "sqrt": (_unary_math(np.sqrt), 1, 1),
    "log": (_unary_math(np.log), 1, 1),
    "exp": (_unary_math(np.exp), 1, 1),
    "min": (lambda *args: functools.reduce(np.minimum, args), 1, 32),
    "max": (lambda *args: functools.reduce(np.maximum, args), 1, 32),
}

BIN_OPS: Dict[Type[ast.operator], Callable[[Value, Value], Value]] = {
    ast.Add: np.add,
    ast.Sub: np.subtract,
    ast.Mult: np.multiply,
    ast.Div: _safe_divide,
    ast.Pow: _power,
}

ALLOWED_NODES: Set[Type[ast.AST]] = {
    ast.Expression,
    ast.BinOp,
    ast.UnaryOp,
    ast.Call,
    ast.Constant,
    ast.Name,
    ast.Load,
    ast.Add,
    ast.Sub,
    ast.Mult,
    ast.Div,
    ast.Pow,
    ast.USub,
    ast.UAdd,
}


def _dotted_name(node: ast.AST) -> str:
    """Flatten a Name/Attribute chain (``hits.bu``) into a dotted string."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return f"{_dotted_name(node.value)}.{node.attr}"
    raise FormulaError(f"Unsupported expression: {ast.dump(node)}")


class _MetricResolver(ast.NodeTransformer):
    """Replace metric references with Name nodes holding canonical metric names."""

    def __init__(self) -> None:
        self.used: Set[str] = set()

    def _resolve(self, node: ast.AST) -> ast.Name:
        dotted = _dotted_name(node)
        canonical = IDENTIFIERS.get(dotted)
        if canonical is None:
            raise FormulaError(f"Unknown identifier: '{dotted}'")
        self.used.add(canonical)
        return ast.copy_location(ast.Name(id=canonical, ctx=ast.Load()), node)

    def visit_Attribute(self, node: ast.Attribute) -> ast.AST:
        return self._resolve(node)

    def visit_Name(self, node: ast.Name) -> ast.AST:
        return self._resolve(node)

    def visit_Call(self, node: ast.Call) -> ast.AST:
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            raise FormulaError(f"Unknown function: '{ast.unparse(node.func)}'")
        if node.keywords:
            raise FormulaError(f"Keyword arguments are not supported in {node.func.id}()")
        _, min_args, max_args = FUNCTIONS[node.func.id]
        if not min_args <= len(node.args) <= max_args:
            raise FormulaError(f"{node.func.id}() takes {min_args}..{max_args} arguments, got {len(node.args)}")
        node.args = [self.visit(arg) for arg in node.args]
        return node


class TrendFormula:
    """
    Parsed trend scoring formula.

    Example:
        formula = TrendFormula.parse("hits.bu * 2 - v")
        formula.evaluate({"bounce_up": 3, "violations": 1})  # 5.0
    """

    def __init__(self, source: str, tree: ast.Expression, identifiers: FrozenSet[str]) -> None:
        self.source = source
        self._tree = tree
        self.identifiers = identifiers

    @classmethod
    def parse(cls, source: str) -> "TrendFormula":
        """
        Parse a formula with strict whitelist validation.

        Raises:
            FormulaError: Syntax errors, disallowed constructs, unknown identifiers
        """
        if not isinstance(source, str) or not source.strip():
            raise FormulaError("Formula must be a non-empty string")

        try:
            tree = ast.parse(source.strip().replace("^", "**"), mode="eval")
        except SyntaxError as e:
            raise FormulaError(f"Syntax error in formula: {e.msg}") from e

        resolver = _MetricResolver()
        tree = resolver.visit(tree)

        for node in ast.walk(tree):
            node_type = type(node)
            if node_type not in ALLOWED_NODES:
                raise FormulaError(f"Disallowed construct: {node_type.__name__}")
            if isinstance(node, ast.Constant) and (
                isinstance(node.value, bool) or not isinstance(node.value, (int, float))
            ):
                raise FormulaError(f"Only numeric constants allowed, got: {node.value!r}")

        return cls(source, tree, frozenset(resolver.used))

    def evaluate(self, metrics: Mapping[str, Value]) -> Value:
        """
        Evaluate the formula.

        Args:
            metrics: Canonical metric name -> value. Values may be scalars
                or equal-length arrays (one cell per candidate line).

        Returns:
            Score (float, or array when metrics are arrays)
        """
        missing = self.identifiers - set(metrics)
        if missing:
            raise FormulaError(f"Missing metric values: {sorted(missing)}")
        result = self._eval_node(self._tree.body, metrics)
        if np.ndim(result) == 0:
            return float(result)
        return np.asarray(result, dtype=np.float64)

    def _eval_node(self, node: ast.AST, metrics: Mapping[str, Value]) -> Value:
        if isinstance(node, ast.Constant):
            return float(node.value)

        if isinstance(node, ast.Name):
            return np.asarray(metrics[node.id], dtype=np.float64)

        if isinstance(node, ast.UnaryOp):
            operand = self._eval_node(node.operand, metrics)
            return -operand if isinstance(node.op, ast.USub) else +operand

        if isinstance(node, ast.BinOp):
            left = self._eval_node(node.left, metrics)
            right = self._eval_node(node.right, metrics)
            with np.errstate(invalid="ignore", over="ignore"):
                return BIN_OPS[type(node.op)](left, right)

        if isinstance(node, ast.Call):
            func = FUNCTIONS[node.func.id][0]
            return func(*[self._eval_node(arg, metrics) for arg in node.args])

        raise FormulaError(f"Cannot evaluate node type: {type(node).__name__}")

    def __repr__(self) -> str:
        return f"TrendFormula({self.source!r})"


def parse_formula(source: str) -> TrendFormula:
    """Parse a trend formula (see TrendFormula.parse)."""
    return TrendFormula.parse(source)
