"""
TapBoard: an adaptive on-screen keyboard core.

This package learns a per-user key layout from training taps, partitions the
keyboard surface into Voronoi cells around the learned key centers, and
resizes adjacent keys in response to edge taps.
"""

__version__ = "0.1.0"
__author__ = "TapBoard Team"

from .learning import LayoutStatistics, LearnModeController, SampleCollector, KeyDescriptor
from .geometry import PlanarTessellator, Site, Bounds
from .morph import MorphAdjuster
from .keyboard import AdaptiveKeyboard
from .data import LayoutStore

__all__ = [
    "LayoutStatistics",
    "LearnModeController",
    "SampleCollector",
    "KeyDescriptor",
    "PlanarTessellator",
    "Site",
    "Bounds",
    "MorphAdjuster",
    "AdaptiveKeyboard",
    "LayoutStore",
]
