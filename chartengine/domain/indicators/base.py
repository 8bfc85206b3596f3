"""
Indicator Base Class.

Defines the uniform interface every indicator variant implements so that
indicators can be selected by name from the static registry and run over
an OHLCV DataFrame. The numeric work lives in plain module-level kernel
functions (``sma``, ``atr`` ...) operating on Series; each class only maps
DataFrame columns and parameters onto its kernel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError, PreconditionError


class IndicatorCategory(Enum):
    """Indicator families."""

    TREND = "trend"
    MOMENTUM = "momentum"
    VOLATILITY = "volatility"
    PATTERN = "pattern"


class IndicatorBase(ABC):
    """
    Abstract base class for indicators with common functionality.

    Provides:
    - Parameter merging with defaults
    - Data validation

    Subclasses must implement:
    - _calculate(): Core calculation logic
    """

    name: str = ""
    category: IndicatorCategory = IndicatorCategory.TREND
    required_fields: List[str] = ["close"]

    _default_params: Dict[str, Any] = {}

    @property
    def default_params(self) -> Dict[str, Any]:
        """Default parameters for this indicator."""
        return self._default_params.copy()

    def calculate(self, data: pd.DataFrame, params: Dict[str, Any] | None = None) -> pd.DataFrame:
        """
        Calculate indicator with parameter merging and validation.

        Args:
            data: OHLCV DataFrame
            params: User-provided parameters (unknown keys are rejected)

        Returns:
            DataFrame with indicator columns, same index as input
        """
        params = params or {}
        unknown = [key for key in params if key not in self._default_params]
        if unknown:
            raise ConfigurationError(unknown[0], f"unknown parameter for indicator {self.name}")

        merged_params = {**self.default_params, **params}

        self._validate_data(data, merged_params)

        return self._calculate(data, merged_params)

    @abstractmethod
    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        """
        Core calculation logic - must be implemented by subclasses.

        Args:
            data: Validated OHLCV DataFrame
            params: Merged parameters

        Returns:
            DataFrame with indicator columns
        """
        ...

    def _validate_data(self, data: pd.DataFrame, params: Dict[str, Any]) -> None:
        """
        Validate that required fields (and a chosen ``source`` column) are present.

        Raises:
            PreconditionError: If required fields are missing
        """
        fields = list(self.required_fields)
        source = params.get("source")
        if source and source not in fields:
            fields.append(source)
        missing = [f for f in fields if f not in data.columns]
        if missing:
            raise PreconditionError(
                f"Indicator {self.name} requires fields {fields}, missing: {missing}"
            )

    @staticmethod
    def _column(data: pd.DataFrame, name: str) -> np.ndarray:
        """Column as a float64 array."""
        return data[name].values.astype(np.float64)
