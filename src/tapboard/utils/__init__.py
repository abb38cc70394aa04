"""Utility modules for TapBoard."""

from .config import (
    TapBoardConfig,
    KeyboardMetrics,
    LearnConfig,
    TessellationConfig,
    MorphConfig,
    load_config,
)
from .logger import setup_logger

__all__ = [
    "TapBoardConfig",
    "KeyboardMetrics",
    "LearnConfig",
    "TessellationConfig",
    "MorphConfig",
    "load_config",
    "setup_logger",
]
