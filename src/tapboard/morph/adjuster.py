"""
Edge-tap key resizing for the fixed-row keyboard.

A tap close to a key's left or right edge moves ``step`` points of width from
the neighbour on that side to the tapped key. The pair's total width is
conserved and the neighbour never drops below ``min_width``; an adjustment that
would break that is rejected rather than clamped.
"""

from typing import Callable, List, NamedTuple, Optional, Sequence

from loguru import logger


class MorphResult(NamedTuple):
    adjusted_index: int
    neighbor_index: int
    tapped_width: float
    neighbor_width: float


def adjust_edge(
    row_keys: Sequence[float],
    tapped_index: int,
    offset_from_center: float,
    button_half_width: float,
    edge_threshold: float,
    step: float,
    min_width: float,
) -> Optional[MorphResult]:
    """
    Compute the width change for an edge tap.

    Args:
        row_keys: Current key widths of the row, left to right
        tapped_index: Index of the tapped key in the row
        offset_from_center: Horizontal tap offset from the key's center
        button_half_width: Half the tapped key's width
        edge_threshold: Distance from the edge that still counts as an edge tap
        step: Width moved between the keys
        min_width: Smallest width a key may be given

    Returns:
        New widths for the tapped key and its neighbour, or None if nothing changes

    Raises:
        IndexError: If tapped_index is outside the row
    """
    if not 0 <= tapped_index < len(row_keys):
        raise IndexError(f"Key index {tapped_index} out of range [0, {len(row_keys)})")

    if abs(offset_from_center) <= button_half_width - edge_threshold:
        return None

    direction = 1 if offset_from_center > 0 else -1
    neighbor_index = tapped_index + direction
    if not 0 <= neighbor_index < len(row_keys):
        logger.debug(f"Edge tap on key {tapped_index} has no neighbour on that side")
        return None

    neighbor_width = row_keys[neighbor_index] - step
    if neighbor_width < min_width:
        logger.debug(
            f"Rejected resize: key {neighbor_index} would shrink to {neighbor_width:.1f} < {min_width:.1f}"
        )
        return None

    return MorphResult(
        adjusted_index=tapped_index,
        neighbor_index=neighbor_index,
        tapped_width=row_keys[tapped_index] + step,
        neighbor_width=neighbor_width,
    )


def apply(row_keys: Sequence[float], result: Optional[MorphResult]) -> List[float]:
    """Return a copy of the row widths with ``result`` applied."""
    widths = list(row_keys)
    if result is not None:
        widths[result.adjusted_index] = result.tapped_width
        widths[result.neighbor_index] = result.neighbor_width
    return widths


class MorphAdjuster:
    """``adjust_edge`` with configured thresholds and a resize callback."""

    def __init__(
        self,
        edge_threshold: float = 4.0,
        step: float = 4.0,
        min_width: float = 20.0,
        on_key_resized: Optional[Callable[[int, float], None]] = None,
    ):
        """
        Raises:
            ValueError: If step is not positive or min_width is negative
        """
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        if min_width < 0:
            raise ValueError(f"min_width must not be negative, got {min_width}")

        self.edge_threshold = edge_threshold
        self.step = step
        self.min_width = min_width
        self.on_key_resized = on_key_resized

    def on_edge_tap(
        self,
        row_keys: Sequence[float],
        tapped_index: int,
        offset_from_center: float,
        button_half_width: Optional[float] = None,
    ) -> Optional[MorphResult]:
        """
        Handle an edge tap on ``row_keys[tapped_index]``.

        ``button_half_width`` defaults to half the key's current width.
        """
        if button_half_width is None and 0 <= tapped_index < len(row_keys):
            button_half_width = row_keys[tapped_index] / 2

        result = adjust_edge(
            row_keys,
            tapped_index,
            offset_from_center,
            button_half_width,
            self.edge_threshold,
            self.step,
            self.min_width,
        )
        if result is None:
            return None

        logger.debug(
            f"Key {result.adjusted_index} -> {result.tapped_width:.1f}, "
            f"key {result.neighbor_index} -> {result.neighbor_width:.1f}"
        )
        if self.on_key_resized is not None:
            self.on_key_resized(result.adjusted_index, result.tapped_width)
            self.on_key_resized(result.neighbor_index, result.neighbor_width)
        return result
