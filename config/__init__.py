"""Configuration management."""

from .config_manager import ConfigManager, get_engine_config, set_engine_config
from .models import EngineConfig

__all__ = ["ConfigManager", "EngineConfig", "get_engine_config", "set_engine_config"]
