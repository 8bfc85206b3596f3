"""
Configuration manager with environment-based loading.

Supports:
- Base configuration (base.yaml)
- Environment-specific overrides (dev.yaml, test.yaml, ...)
- A process-wide default built from dataclass defaults
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from chartengine.domain.exceptions import ConfigurationError
from chartengine.utils.logging_setup import get_logger

from .models import (
    EngineConfig,
    LoggingConfig,
    TrendScorerConfig,
    ZigZagConfig,
    TimeSpanConfig,
    FormationConfig,
    DoublePeakParams,
    DoublePeakConfig,
    HeadAndShouldersConfig,
)


logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent

_engine_config: Optional[EngineConfig] = None


class ConfigManager:
    """
    Configuration manager with environment support.

    Loads configuration in this order:
    1. base.yaml (default config)
    2. {env}.yaml (environment-specific, e.g., dev.yaml)

    Later configs override earlier ones.
    """

    def __init__(self, config_dir: str | Path = DEFAULT_CONFIG_DIR, env: str = "dev"):
        """
        Initialize config manager.

        Args:
            config_dir: Directory containing config files.
            env: Environment name (dev, test, etc).
        """
        self.config_dir = Path(config_dir)
        self.env = env
        self.config: Dict[str, Any] = {}

    def load(self) -> EngineConfig:
        """
        Load configuration from YAML files.

        Returns:
            EngineConfig object.

        Raises:
            FileNotFoundError: If base config not found.
            ConfigurationError: If a section holds invalid values.
        """
        base_path = self.config_dir / "base.yaml"
        if not base_path.exists():
            raise FileNotFoundError(f"Base config not found: {base_path}")

        self.config = self._load_yaml(base_path)
        logger.info(f"Loaded base config from {base_path}")

        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            env_config = self._load_yaml(env_path)
            self.config = self._merge_dicts(self.config, env_config)
            logger.info(f"Loaded {self.env} config from {env_path}")

        return self._parse_config()

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML file."""
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}

    def _merge_dicts(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts (override wins)."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _parse_config(self) -> EngineConfig:
        """Parse raw dict into EngineConfig."""
        defaults = EngineConfig()
        section = "config"
        try:
            section = "logging"
            logging_raw = self.config.get("logging", {})
            logging_config = LoggingConfig(
                level=str(logging_raw.get("level", defaults.logging.level)),
                json=bool(logging_raw.get("json", defaults.logging.json)),
                colors=bool(logging_raw.get("colors", defaults.logging.colors)),
                category_levels=dict(logging_raw.get("category_levels", {}) or {}),
            )

            section = "trends"
            trends_raw = self.config.get("trends", {})
            trends = TrendScorerConfig(
                touch_tolerance_atr=float(trends_raw.get("touch_tolerance_atr", defaults.trends.touch_tolerance_atr)),
                max_candidates=int(trends_raw.get("max_candidates", defaults.trends.max_candidates)),
                max_seconds=float(trends_raw.get("max_seconds", defaults.trends.max_seconds)),
            )

            section = "zigzag"
            zigzag_raw = self.config.get("zigzag", {})
            zigzag = ZigZagConfig(
                depth=int(zigzag_raw.get("depth", defaults.zigzag.depth)),
                deviation=float(zigzag_raw.get("deviation", defaults.zigzag.deviation)),
                backstep=int(zigzag_raw.get("backstep", defaults.zigzag.backstep)),
            )

            section = "formations"
            formations_raw = self.config.get("formations", {})
            time_spans_raw = formations_raw.get("time_spans")
            if time_spans_raw:
                time_spans = {
                    name: TimeSpanConfig(
                        lookback=int(span["lookback"]),
                        zigzag_depth=int(span["zigzag_depth"]),
                        zigzag_deviation=float(span["zigzag_deviation"]),
                        zigzag_backstep=int(span["zigzag_backstep"]),
                    )
                    for name, span in time_spans_raw.items()
                }
            else:
                time_spans = defaults.formations.time_spans
            formations = FormationConfig(
                time_spans=time_spans,
                atr_length=int(formations_raw.get("atr_length", defaults.formations.atr_length)),
                flat_slope_tolerance=float(formations_raw.get(
                    "flat_slope_tolerance", defaults.formations.flat_slope_tolerance)),
                parallel_tolerance=float(formations_raw.get(
                    "parallel_tolerance", defaults.formations.parallel_tolerance)),
                min_touches=int(formations_raw.get("min_touches", defaults.formations.min_touches)),
                max_violations_percent=float(formations_raw.get(
                    "max_violations_percent", defaults.formations.max_violations_percent)),
                line_formula=str(formations_raw.get("line_formula", defaults.formations.line_formula)),
                max_lines_per_side=int(formations_raw.get(
                    "max_lines_per_side", defaults.formations.max_lines_per_side)),
            )

            section = "double_peak"
            double_peak_raw = self.config.get("double_peak", {})
            peak_spans_raw = double_peak_raw.get("time_spans")
            if peak_spans_raw:
                peak_spans = {
                    name: DoublePeakParams(**params) for name, params in peak_spans_raw.items()
                }
            else:
                peak_spans = defaults.double_peak.time_spans
            double_peak = DoublePeakConfig(
                time_spans=peak_spans,
                atr_length=int(double_peak_raw.get("atr_length", defaults.double_peak.atr_length)),
                support_break_atr=float(double_peak_raw.get(
                    "support_break_atr", defaults.double_peak.support_break_atr)),
                adam_curvature_atr=float(double_peak_raw.get(
                    "adam_curvature_atr", defaults.double_peak.adam_curvature_atr)),
            )

            section = "head_and_shoulders"
            hs_raw = self.config.get("head_and_shoulders", {})
            head_and_shoulders = HeadAndShouldersConfig(
                depth=int(hs_raw.get("depth", defaults.head_and_shoulders.depth)),
                deviation=float(hs_raw.get("deviation", defaults.head_and_shoulders.deviation)),
                backstep=int(hs_raw.get("backstep", defaults.head_and_shoulders.backstep)),
                head_height=float(hs_raw.get("head_height", defaults.head_and_shoulders.head_height)),
            )

        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(section, f"Failed to parse config: {e}") from e

        return EngineConfig(
            logging=logging_config,
            trends=trends,
            zigzag=zigzag,
            formations=formations,
            double_peak=double_peak,
            head_and_shoulders=head_and_shoulders,
            raw=self.config,
        )


def get_engine_config() -> EngineConfig:
    """
    Get the process-wide engine configuration.

    Returns the configuration installed with set_engine_config(), or the
    dataclass defaults when none was installed.
    """
    global _engine_config
    if _engine_config is None:
        _engine_config = EngineConfig()
    return _engine_config


def set_engine_config(config: Optional[EngineConfig]) -> None:
    """Install (or with None, reset) the process-wide engine configuration."""
    global _engine_config
    _engine_config = config
