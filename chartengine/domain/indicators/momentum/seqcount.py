"""
Sequential Count (TD Sequential setup and countdown).

Setup:
- Buy setup: consecutive closes below the close 4 candles earlier.
- Sell setup: consecutive closes above the close 4 candles earlier.
- A broken streak resets the count. Reaching ``setup_length`` completes the
  setup and the next qualifying candle starts again from 1.

Countdown:
- Starts on the candle completing a setup of the same side and cancels the
  opposite side's running countdown.
- Buy countdown counts closes at or below the low 2 candles earlier; sell
  countdown counts closes at or above the high 2 candles earlier. Candles
  in between are skipped, not reset.
- Ends at ``countdown_length``. A setup completing while its countdown runs
  does not restart it.

Every output series holds the count on the candles where it advanced and
is missing elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import numpy as np
import pandas as pd

from ...series.core import check_same_length, freeze, validate_length
from ..base import IndicatorBase, IndicatorCategory

SETUP_LOOKBACK = 4
COUNTDOWN_LOOKBACK = 2


@dataclass(frozen=True, eq=False)
class SeqCount:
    """Setup and countdown counts of both sides."""
    buy_setup: np.ndarray
    sell_setup: np.ndarray
    countdown_buy: np.ndarray
    countdown_sell: np.ndarray


def seqcount(
    high: np.ndarray,
    low: np.ndarray,
    close: np.ndarray,
    setup_length: int = 9,
    countdown_length: int = 13,
) -> SeqCount:
    """
    Sequential setup and countdown counts.

    Args:
        high: High series
        low: Low series
        close: Close series
        setup_length: Candles completing a setup
        countdown_length: Candles completing a countdown

    Raises:
        ConfigurationError: Invalid lengths.
        PreconditionError: Series lengths differ.
    """
    setup_length = validate_length(setup_length, "setup_length")
    countdown_length = validate_length(countdown_length, "countdown_length")
    high = np.asarray(high, dtype=np.float64)
    low = np.asarray(low, dtype=np.float64)
    close = np.asarray(close, dtype=np.float64)
    n = check_same_length(high, low, close)

    buy_setup = np.full(n, np.nan, dtype=np.float64)
    sell_setup = np.full(n, np.nan, dtype=np.float64)
    countdown_buy = np.full(n, np.nan, dtype=np.float64)
    countdown_sell = np.full(n, np.nan, dtype=np.float64)

    buy_count = sell_count = 0
    buy_countdown = sell_countdown = 0
    buy_active = sell_active = False

    for i in range(SETUP_LOOKBACK, n):
        # NaN comparisons are False, so a missing close breaks both streaks
        buy_count = buy_count + 1 if close[i] < close[i - SETUP_LOOKBACK] else 0
        sell_count = sell_count + 1 if close[i] > close[i - SETUP_LOOKBACK] else 0
        if buy_count:
            buy_setup[i] = buy_count
        if sell_count:
            sell_setup[i] = sell_count

        if buy_count == setup_length:
            buy_count = 0
            sell_active = False
            if not buy_active:
                buy_active, buy_countdown = True, 0
        if sell_count == setup_length:
            sell_count = 0
            buy_active = False
            if not sell_active:
                sell_active, sell_countdown = True, 0

        if buy_active and close[i] <= low[i - COUNTDOWN_LOOKBACK]:
            buy_countdown += 1
            countdown_buy[i] = buy_countdown
            buy_active = buy_countdown < countdown_length
        if sell_active and close[i] >= high[i - COUNTDOWN_LOOKBACK]:
            sell_countdown += 1
            countdown_sell[i] = sell_countdown
            sell_active = sell_countdown < countdown_length

    return SeqCount(
        buy_setup=freeze(buy_setup),
        sell_setup=freeze(sell_setup),
        countdown_buy=freeze(countdown_buy),
        countdown_sell=freeze(countdown_sell),
    )


class SeqCountIndicator(IndicatorBase):
    """
    Sequential Count indicator.

    Default Parameters:
        setup_length: 9
        countdown_length: 13
    """

    name = "seqcount"
    category = IndicatorCategory.MOMENTUM
    required_fields = ["high", "low", "close"]

    _default_params = {
        "setup_length": 9,
        "countdown_length": 13,
    }

    def _calculate(self, data: pd.DataFrame, params: Dict[str, Any]) -> pd.DataFrame:
        result = seqcount(
            self._column(data, "high"),
            self._column(data, "low"),
            self._column(data, "close"),
            params["setup_length"],
            params["countdown_length"],
        )
        return pd.DataFrame(
            {
                "seq_buy_setup": result.buy_setup,
                "seq_sell_setup": result.sell_setup,
                "seq_countdown_buy": result.countdown_buy,
                "seq_countdown_sell": result.countdown_sell,
            },
            index=data.index,
        )
