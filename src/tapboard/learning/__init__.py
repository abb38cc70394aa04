"""Learn mode: tap collection, statistics and session control."""

from .collector import SampleCollector, TapRecord
from .statistics import KeyDescriptor, LayoutStatistics, Size, Vec2, group_keys_into_rows
from .controller import LearnModeController, LearnState, TrainingSession

__all__ = [
    "SampleCollector",
    "TapRecord",
    "KeyDescriptor",
    "LayoutStatistics",
    "Size",
    "Vec2",
    "group_keys_into_rows",
    "LearnModeController",
    "LearnState",
    "TrainingSession",
]
