"""
Static key grid used before a layout has been learned and in morph mode.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from ..utils.config import KeyboardMetrics

SPACEBAR = "spacebar"

DEFAULT_ROWS: Tuple[Tuple[str, ...], ...] = (
    ("q", "w", "e", "r", "t", "y", "u", "i", "o", "p"),
    ("a", "s", "d", "f", "g", "h", "j", "k", "l"),
    ("z", "x", "c", "v", "b", "n", "m"),
    (SPACEBAR,),
)


def key_text(label: str) -> str:
    """Text inserted by a static key."""
    return " " if label == SPACEBAR else label


class StaticLayout:
    """
    Rows of fixed-order keys with live widths.

    Keys are laid out left to right from the horizontal margin with
    ``key_spacing`` between them; rows are stacked top to bottom with
    ``row_spacing`` between them. Every row starts with equal key widths.
    """

    def __init__(
        self,
        width: float,
        height: float,
        metrics: Optional[KeyboardMetrics] = None,
        rows: Sequence[Sequence[str]] = DEFAULT_ROWS,
    ):
        if width <= 0 or height <= 0:
            raise ValueError("Keyboard width and height must be positive")
        if not rows or any(not row for row in rows):
            raise ValueError("Every row needs at least one key")

        self.width = width
        self.height = height
        self.metrics = metrics if metrics is not None else KeyboardMetrics()
        self.rows: List[List[str]] = [list(row) for row in rows]
        self.widths: List[List[float]] = [self._initial_widths(len(row)) for row in self.rows]

    def _initial_widths(self, count: int) -> List[float]:
        usable = self.width - 2 * self.metrics.horizontal_margin - (count - 1) * self.metrics.key_spacing
        return [max(self.metrics.min_key_width, usable / count)] * count

    @property
    def row_height(self) -> float:
        n = len(self.rows)
        return (self.height - (n - 1) * self.metrics.row_spacing) / n

    def label(self, row_index: int, key_index: int) -> str:
        return self.rows[row_index][key_index]

    def row_widths(self, row_index: int) -> List[float]:
        return list(self.widths[row_index])

    def set_row_widths(self, row_index: int, widths: Sequence[float]) -> None:
        if len(widths) != len(self.rows[row_index]):
            raise ValueError(
                f"Row {row_index} has {len(self.rows[row_index])} keys, got {len(widths)} widths"
            )
        self.widths[row_index] = list(widths)

    def key_frames(self) -> List[Tuple[str, float, float, float, float]]:
        """``(label, x, y, width, height)`` for every key, row by row."""
        frames = []
        for r, (row, widths) in enumerate(zip(self.rows, self.widths)):
            y = r * (self.row_height + self.metrics.row_spacing)
            x = self.metrics.horizontal_margin
            for label, w in zip(row, widths):
                frames.append((label, x, y, w, self.row_height))
                x += w + self.metrics.key_spacing
        return frames

    def key_centers(self) -> Dict[str, Tuple[float, float]]:
        """Center of every key, keyed by the text it inserts."""
        return {
            key_text(label): (x + w / 2, y + h / 2)
            for label, x, y, w, h in self.key_frames()
        }
