"""
Chart engine: series computation and chart pattern recognition.

Packages:
- chartengine.domain.series: Series primitives, candles, windowed reducers, sparse utilities
- chartengine.domain.indicators: Indicator kernels, registry and the ZigZag extractor
- chartengine.domain.trends: Formula-driven trend line scoring
- chartengine.domain.patterns: Channel / broadening / triangle / wedge / double peak / head-and-shoulders matchers
- chartengine.utils: Logging, timing and evaluation tracing
"""

__version__ = "0.1.0"
