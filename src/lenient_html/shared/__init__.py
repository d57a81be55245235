"""Shared utilities for lenient HTML parsing.

This module provides the configuration objects, diagnostic types and logging
helpers used across the tokenizer, tree builder and API layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
    set_package_log_level,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "GlobalConfig",
    "ParserConfig",
    "PerformanceMetrics",
    "TokenizerConfig",
    "TreeConfig",
    "get_logger",
    "set_package_log_level",
]
