"""Core utilities shared across :mod:`tscomponents` modules.

The core namespace provides cohesive seams for configuration loading, logging
setup, and POSIX path handling so the resolver modules remain lightweight.
"""

from __future__ import annotations

from .config import GeneratorConfig, load_config
from .logging import Logger, configure_logging, get_logger

__all__ = [
    "GeneratorConfig",
    "Logger",
    "configure_logging",
    "get_logger",
    "load_config",
]
