"""
Logging setup with categories and evaluation ID support.

Provides:
- 5 log categories: system, indicators, trends, patterns, perf
- Automatic module → category routing
- Evaluation ID correlation in all logs
- Console output with colours, or single-line JSON

Categories:
- system: Configuration loading, registry, errors
- indicators: Series algebra, windowed reducers, zigzag
- trends: Trend line enumeration and scoring
- patterns: Channel / wedge / double peak / head-and-shoulders matchers
- perf: Timing diagnostics
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List

if TYPE_CHECKING:
    from config.models import LoggingConfig

from .trace_context import get_evaluation_id

# =============================================================================
# LOG CATEGORIES AND ROUTING
# =============================================================================

ROOT_LOGGER_NAME = "chartengine"

CATEGORIES = ["system", "indicators", "trends", "patterns", "perf"]

# Module path → category routing
# More specific paths should come first
MODULE_ROUTING: List[tuple[str, str]] = [
    ("chartengine.domain.indicators", "indicators"),
    ("chartengine.domain.series", "indicators"),
    ("chartengine.domain.trends", "trends"),
    ("chartengine.domain.patterns", "patterns"),
    ("chartengine.utils.perf_logger", "perf"),
    ("config", "system"),
    # Default fallback
    ("chartengine", "system"),
]

# Configured category loggers
_category_loggers: Dict[str, logging.Logger] = {}


def get_category_for_module(module_name: str) -> str:
    """First matching prefix in MODULE_ROUTING, else "system"."""
    for prefix, category in MODULE_ROUTING:
        if module_name.startswith(prefix):
            return category
    return "system"


# =============================================================================
# FORMATTERS
# =============================================================================

def _category_of_logger(logger_name: str) -> str:
    parts = logger_name.split(".")
    if len(parts) >= 2 and parts[0] == ROOT_LOGGER_NAME and parts[1] in CATEGORIES:
        return parts[1]
    return "system"


class JSONFormatter(logging.Formatter):
    """One JSON object per line: ts, level, cat, eval, msg and optional data/exception."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "cat": _category_of_logger(record.name),
            "eval": get_evaluation_id(),
            "msg": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """``[LEVEL  ] [evaluation] message``, optionally coloured by level."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        tag = f"[{record.levelname:7}]"
        if self.use_colors:
            tag = f"{self.LEVEL_COLORS.get(record.levelno, '')}{tag}{self.RESET}"
        line = f"{tag} [{get_evaluation_id()}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


# =============================================================================
# LOGGER FACTORY
# =============================================================================

def get_logger(module_name: str) -> logging.Logger:
    """Category logger for a module; call as ``get_logger(__name__)``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{get_category_for_module(module_name)}")


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure the chartengine logger hierarchy.

    Installs a single stdout handler on the root ``chartengine`` logger;
    category loggers propagate to it. Calling it again replaces the handler.

    Args:
        config: Logging configuration.

    Returns:
        The configured root chartengine logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root.handlers.clear()

    if config.json:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = ConsoleFormatter(use_colors=config.colors)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.propagate = False

    for category in CATEGORIES:
        category_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}")
        level = config.category_levels.get(category)
        if level:
            category_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        _category_loggers[category] = category_logger

    return root


def get_category_loggers() -> Dict[str, logging.Logger]:
    """Get all configured category loggers."""
    return _category_loggers.copy()


def get_debug_logger(category: str, topic: str) -> logging.Logger:
    """
    Get a child logger that is forced to DEBUG for one topic of a category.

    Used by the trend engine's per-call debugging switch so a single
    computation can be traced without raising the global level.

    Args:
        category: Category name (e.g., "trends").
        topic: Topic under the category (e.g., "hits").

    Returns:
        Logger named ``chartengine.<category>.<topic>`` at DEBUG level.
    """
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{category}.{topic}")
    logger.setLevel(logging.DEBUG)
    return logger


def shutdown_logging() -> None:
    """Flush and detach handlers from the chartengine root logger."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.flush()
        root.removeHandler(handler)
    _category_loggers.clear()
