"""
Domain exceptions for the chart engine.

Implements a hierarchy distinguishing between errors in how a computation
was requested (bad parameters, malformed formulas), errors in the data it
was handed (mismatched or unsorted series) and the rare numeric states that
have no defined fallback.

Missing history and "no pattern found" are NOT errors: they surface as
missing cells and ``None`` results respectively.
"""


class ChartEngineError(Exception):
    """Base class for all chart engine exceptions."""
    pass


class ConfigurationError(ChartEngineError):
    """
    Invalid parameter passed when building a computation.

    Examples:
    - Non-positive or non-integer window length
    - Unknown enum value (band type, time span, pattern type)
    - Malformed trend formula
    """

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(f"{parameter}: {message}")


class FormulaError(ConfigurationError):
    """Trend formula failed to parse or references an unknown metric."""

    def __init__(self, message: str):
        super().__init__("formula", message)


class PreconditionError(ChartEngineError):
    """
    Input data violates an invariant the operation depends on.

    Examples:
    - Series of different lengths combined together
    - Timestamp arrays that are not sorted ascending
    - Candle frame missing a required column
    """
    pass


class ComputationError(ChartEngineError):
    """Unrecoverable numeric state or an exhausted computation budget."""
    pass
