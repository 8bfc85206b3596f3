"""Domain layer: series, indicators, trend scoring and pattern matching."""
