"""
Tests for configuration loading.

Tests:
- Shipped base.yaml parses into EngineConfig
- Environment file deep-merges over base
- Missing base file and invalid values
- Process-wide config install/reset
"""

from pathlib import Path

import pytest
import yaml

from chartengine.domain.exceptions import ConfigurationError
from config.config_manager import DEFAULT_CONFIG_DIR, ConfigManager, get_engine_config, set_engine_config
from config.models import EngineConfig


def _write(path: Path, data: dict) -> None:
    path.write_text(yaml.safe_dump(data))


class TestConfigManager:
    """Tests for ConfigManager.load()."""

    def test_shipped_base_matches_defaults(self) -> None:
        config = ConfigManager(DEFAULT_CONFIG_DIR, env="none").load()
        defaults = EngineConfig()
        assert config.trends == defaults.trends
        assert config.zigzag == defaults.zigzag
        assert config.formations == defaults.formations
        assert config.double_peak == defaults.double_peak
        assert config.head_and_shoulders == defaults.head_and_shoulders
        assert config.logging.category_levels == {"perf": "WARNING"}

    def test_env_override_is_deep_merged(self, tmp_path: Path) -> None:
        _write(tmp_path / "base.yaml", {"trends": {"max_candidates": 100, "max_seconds": 5.0}})
        _write(tmp_path / "test.yaml", {"trends": {"max_seconds": 1.5}})

        config = ConfigManager(tmp_path, env="test").load()

        assert config.trends.max_candidates == 100
        assert config.trends.max_seconds == 1.5
        assert config.trends.touch_tolerance_atr == 0.1
        assert config.raw["trends"] == {"max_candidates": 100, "max_seconds": 1.5}

    def test_empty_base_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "base.yaml").write_text("")
        config = ConfigManager(tmp_path).load()
        assert config.formations.time_spans == EngineConfig().formations.time_spans

    def test_custom_time_spans(self, tmp_path: Path) -> None:
        _write(tmp_path / "base.yaml", {
            "formations": {
                "time_spans": {
                    "intraday": {"lookback": 50, "zigzag_depth": 3, "zigzag_deviation": 0.5, "zigzag_backstep": 1},
                },
            },
        })
        config = ConfigManager(tmp_path).load()
        assert list(config.formations.time_spans) == ["intraday"]
        assert config.formations.time_spans["intraday"].lookback == 50

    def test_missing_base(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path).load()

    def test_invalid_value(self, tmp_path: Path) -> None:
        _write(tmp_path / "base.yaml", {"zigzag": {"depth": "deep"}})
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(tmp_path).load()
        assert exc_info.value.parameter == "zigzag"

    def test_unknown_double_peak_field(self, tmp_path: Path) -> None:
        _write(tmp_path / "base.yaml", {"double_peak": {"time_spans": {"short term": {"max_width": 3}}}})
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(tmp_path).load()
        assert exc_info.value.parameter == "double_peak"


class TestEngineConfig:
    """Tests for the process-wide configuration."""

    def test_default_instance_is_cached(self) -> None:
        assert get_engine_config() is get_engine_config()

    def test_install_and_reset(self) -> None:
        custom = EngineConfig()
        custom.trends.max_candidates = 10
        set_engine_config(custom)
        assert get_engine_config().trends.max_candidates == 10

        set_engine_config(None)
        assert get_engine_config().trends.max_candidates == 20000
