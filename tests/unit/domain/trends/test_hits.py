"""
Unit tests for hit metrics of candidate trend lines.

The support chart below is measured against a flat line at 100 with zero
touch tolerance:

    i   high   low    close   vs line
    0   102    100    101     touch
    1   104    102    103     above
    2   103    100    101     touch (3-bar low)
    3   104    101    103     above
    4   101     99     99.5   touch, close below
    5    99     97     98     below
    6   101     99.5  100.5   touch
    7   103    101    102     above
"""

import numpy as np
import pytest

from chartengine.domain.exceptions import ConfigurationError
from chartengine.domain.series.candles import Candles
from chartengine.domain.trends.hits import HitCounter


@pytest.fixture
def support_candles() -> Candles:
    high = [102.0, 104.0, 103.0, 104.0, 101.0, 99.0, 101.0, 103.0]
    low = [100.0, 102.0, 100.0, 101.0, 99.0, 97.0, 99.5, 101.0]
    close = [101.0, 103.0, 101.0, 103.0, 99.5, 98.0, 100.5, 102.0]
    return Candles.from_arrays(open=close, high=high, low=low, close=close)


class TestHitCounter:
    """Tests for HitCounter.measure()."""

    def test_classification(self, support_candles: Candles) -> None:
        counter = HitCounter(support_candles, "low", atr_length=3, touch_tolerance_atr=0.0)
        hits = counter.measure(0, 100.0, 7, 100.0)

        assert hits.length == 8
        assert hits.number == 4
        assert hits.percent == 50.0
        assert hits.candles_above == 3
        assert hits.candles_below == 1
        assert hits.violations == 2
        assert hits.max_confirmation_distance == 2
        assert hits.slope_percent == 0.0

    def test_bounces(self, support_candles: Candles) -> None:
        counter = HitCounter(support_candles, "low", atr_length=3, touch_tolerance_atr=0.0)
        hits = counter.measure(0, 100.0, 7, 100.0)

        assert hits.bounce_up == 3
        assert hits.bounce_down == 1
        assert hits.bounce_up_candles == 3
        assert hits.bounce_down_candles == 1
        # Only the cluster at 2 comes from above and leaves above
        assert hits.bounce_up_strict == 1
        assert hits.bounce_down_strict == 0

    def test_peaks(self, support_candles: Candles) -> None:
        counter = HitCounter(support_candles, "low", atr_length=3, touch_tolerance_atr=0.0)
        hits = counter.measure(0, 100.0, 7, 100.0)
        assert hits.peaks_down == 1
        assert hits.peaks_up == 0

    def test_price_deviation_quartiles_are_ordered(self, support_candles: Candles) -> None:
        hits = HitCounter(support_candles, "low", atr_length=3).measure(0, 100.0, 7, 100.0)
        assert 0.0 <= hits.price_deviation_p25 <= hits.price_deviation_p50 <= hits.price_deviation_p75

    def test_line_points(self, support_candles: Candles) -> None:
        counter = HitCounter(
            support_candles,
            "low",
            atr_length=3,
            touch_tolerance_atr=0.0,
            base_indexes=np.array([0, 2, 6]),
            base_prices=np.array([100.0, 100.0, 99.5]),
            base_weights=np.array([1.0, 2.0, 3.0]),
        )
        hits = counter.measure(0, 100.0, 2, 100.0)
        assert hits.line_points_base == 2
        assert hits.line_points_weight == 3.0
        assert hits.trends_accumulated == 1

    def test_end_index_limits_measurement(self, support_candles: Candles) -> None:
        counter = HitCounter(support_candles, "low", atr_length=3, touch_tolerance_atr=0.0)
        hits = counter.measure(0, 100.0, 2, 100.0, end_index=3)
        assert hits.length == 4
        assert hits.number == 2
        assert hits.violations == 0

    def test_slope_percent(self, channel_candles: Candles) -> None:
        hits = HitCounter(channel_candles, "low").measure(0, 99.0, 10, 109.0)
        assert hits.slope_percent == pytest.approx(100.0 / 99.0)
        assert hits.number == 60
        assert hits.violations == 0

    def test_as_dict_has_every_metric(self, channel_candles: Candles) -> None:
        hits = HitCounter(channel_candles, "low").measure(0, 99.0, 10, 109.0)
        assert hits.as_dict()["bounce_up"] == hits.bounce_up
        assert len(hits.as_dict()) == 24

    def test_invalid_candle_field(self, channel_candles: Candles) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            HitCounter(channel_candles, "close")
        assert exc_info.value.parameter == "candle_field"

    def test_invalid_tolerance(self, channel_candles: Candles) -> None:
        with pytest.raises(ConfigurationError):
            HitCounter(channel_candles, "low", touch_tolerance_atr=-0.1)
