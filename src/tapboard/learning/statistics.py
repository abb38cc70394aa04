"""
Reduction of training taps into per-key layout descriptors.

Every character with at least one tap gets a ``KeyDescriptor`` describing where
the user actually taps for it: central tendency (mean, median), dispersion
(variance, standard deviation, spread, IQR), a two-sigma confidence bound and a
suggested key size derived from it, and a hit accuracy.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Any

import numpy as np
from loguru import logger

from .collector import TapRecord
from ..diagnostics import DiagnosticCallback, DiagnosticKind, report


def _finite(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"expected a finite number, got {value!r}")
    return number


class Vec2(NamedTuple):
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Vec2":
        return cls(_finite(data["x"]), _finite(data["y"]))


class Size(NamedTuple):
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Size":
        return cls(_finite(data["width"]), _finite(data["height"]))


# Persisted field name -> attribute name, for the Vec2-valued fields
_VEC_FIELDS = {
    "mean": "mean",
    "median": "median",
    "variance": "variance",
    "stdDev": "std_dev",
    "min": "min",
    "max": "max",
    "spread": "spread",
    "iqr": "iqr",
    "confidenceBounds": "confidence_bounds",
}


@dataclass(frozen=True)
class KeyDescriptor:
    """Statistical description of the taps recorded for one key."""

    mean: Vec2
    median: Vec2
    variance: Vec2
    std_dev: Vec2
    min: Vec2
    max: Vec2
    spread: Vec2
    iqr: Vec2
    suggested_size: Size
    sample_count: int
    accuracy: float
    confidence_bounds: Vec2

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted camelCase field names."""
        data: Dict[str, Any] = {
            name: getattr(self, attr).to_dict() for name, attr in _VEC_FIELDS.items()
        }
        data["suggestedSize"] = self.suggested_size.to_dict()
        data["sampleCount"] = self.sample_count
        data["accuracy"] = self.accuracy
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeyDescriptor":
        """
        Parse a persisted descriptor.

        Raises:
            KeyError: If a field is missing
            TypeError: If a field has the wrong shape
            ValueError: If a value is not a finite number or the sample count is not positive
        """
        fields = {attr: Vec2.from_dict(data[name]) for name, attr in _VEC_FIELDS.items()}
        sample_count = int(data["sampleCount"])
        if sample_count < 1:
            raise ValueError(f"sampleCount must be at least 1, got {sample_count}")
        return cls(
            suggested_size=Size.from_dict(data["suggestedSize"]),
            sample_count=sample_count,
            accuracy=_finite(data["accuracy"]),
            **fields,
        )


def _axis_stats(values: np.ndarray) -> Dict[str, float]:
    n = len(values)
    ordered = np.sort(values)

    # cumsum adds in recorded order; np.mean and np.sum sum pairwise
    mean = float(np.cumsum(values)[-1]) / n
    deviations = values - mean
    variance = float(np.cumsum(deviations * deviations)[-1]) / n

    if n % 2 == 0:
        median = float((ordered[n // 2 - 1] + ordered[n // 2]) / 2)
    else:
        median = float(ordered[n // 2])

    q1 = float(ordered[min(int(n * 0.25), n - 1)])
    q3 = float(ordered[min(int(n * 0.75), n - 1)])

    low = float(ordered[0])
    high = float(ordered[-1])

    return {
        "mean": mean,
        "variance": variance,
        "std_dev": float(np.sqrt(variance)),
        "median": median,
        "min": low,
        "max": high,
        "spread": high - low,
        "iqr": q3 - q1,
    }


class LayoutStatistics:
    """Computes ``KeyDescriptor`` maps from recorded taps."""

    def __init__(
        self,
        min_key_width: float = 20.0,
        min_key_height: float = 36.0,
        on_diagnostic: Optional[DiagnosticCallback] = None,
    ):
        """
        Initialize the reducer.

        Args:
            min_key_width: Floor for the suggested key width
            min_key_height: Floor for the suggested key height
            on_diagnostic: Optional callback for non-fatal conditions
        """
        self.min_key_width = min_key_width
        self.min_key_height = min_key_height
        self.on_diagnostic = on_diagnostic

    def describe(self, records: Sequence[TapRecord]) -> KeyDescriptor:
        """
        Reduce the taps for a single character.

        Args:
            records: Non-empty list of taps, in recording order

        Returns:
            Descriptor for the character

        Raises:
            ValueError: If records is empty
        """
        if not records:
            raise ValueError("Cannot describe a key without samples")

        points = np.array([record.position for record in records], dtype=np.float64)
        xs = _axis_stats(points[:, 0])
        ys = _axis_stats(points[:, 1])

        def pair(name: str) -> Vec2:
            return Vec2(xs[name], ys[name])

        # Two standard deviations, about 95% of taps under a normal model
        confidence = Vec2(xs["std_dev"] * 2, ys["std_dev"] * 2)

        within = (
            (np.abs(points[:, 0] - xs["mean"]) <= xs["std_dev"])
            & (np.abs(points[:, 1] - ys["mean"]) <= ys["std_dev"])
        )
        accuracy = float(np.count_nonzero(within)) / len(records) * 100

        return KeyDescriptor(
            mean=pair("mean"),
            median=pair("median"),
            variance=pair("variance"),
            std_dev=pair("std_dev"),
            min=pair("min"),
            max=pair("max"),
            spread=pair("spread"),
            iqr=pair("iqr"),
            suggested_size=Size(
                max(self.min_key_width, confidence.x * 2),
                max(self.min_key_height, confidence.y * 2),
            ),
            sample_count=len(records),
            accuracy=accuracy,
            confidence_bounds=confidence,
        )

    def compute(self, records: Mapping[str, Sequence[TapRecord]]) -> Dict[str, KeyDescriptor]:
        """
        Reduce every character's taps.

        Characters without taps are left out of the result.

        Args:
            records: Mapping of character to its taps

        Returns:
            Mapping of character to descriptor
        """
        descriptors = {
            character: self.describe(samples)
            for character, samples in records.items()
            if samples
        }
        if not descriptors:
            report(self.on_diagnostic, DiagnosticKind.EMPTY_INPUT, "No tap samples to reduce")
            return {}

        logger.info(f"Computed descriptors for {len(descriptors)} keys")
        return descriptors


def group_keys_into_rows(
    descriptors: Mapping[str, KeyDescriptor],
    tolerance: float = 36.0,
) -> List[List[str]]:
    """
    Cluster learned keys into rows by their mean y.

    Keys are sorted by mean y and a new row starts whenever the gap to the
    previous key is at least ``tolerance``. Each row is ordered left to right.

    Args:
        descriptors: Learned descriptors
        tolerance: Vertical gap that separates two rows

    Returns:
        Rows of key labels, top to bottom
    """
    ordered = sorted(descriptors.items(), key=lambda item: (item[1].mean.y, item[0]))

    rows: List[List[str]] = []
    current: List[str] = []
    last_y: Optional[float] = None
    for key, descriptor in ordered:
        if last_y is not None and abs(descriptor.mean.y - last_y) >= tolerance:
            rows.append(current)
            current = []
        current.append(key)
        last_y = descriptor.mean.y
    if current:
        rows.append(current)

    return [sorted(row, key=lambda k: (descriptors[k].mean.x, k)) for row in rows]
