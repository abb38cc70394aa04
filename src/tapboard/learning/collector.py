"""
Tap sample collection for learn mode.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple
from types import MappingProxyType

from loguru import logger


Point = Tuple[float, float]


@dataclass(frozen=True)
class TapRecord:
    """A single training tap aimed at ``character``."""

    character: str
    position: Point
    iteration: int


class SampleCollector:
    """Accumulates tap records per target character during a training session."""

    def __init__(self):
        self._records: Dict[str, List[TapRecord]] = {}
        self.iteration = 1

    @property
    def records(self) -> Mapping[str, List[TapRecord]]:
        """Per-character records, in insertion order."""
        return MappingProxyType(self._records)

    def __len__(self) -> int:
        return sum(len(records) for records in self._records.values())

    def set_iteration(self, iteration: int) -> None:
        self.iteration = iteration

    def record(self, character: str, position: Point) -> TapRecord:
        """
        Append a tap for ``character`` tagged with the current iteration.

        Args:
            character: Target character the user was prompted for
            position: Tap location in device space

        Returns:
            The stored record
        """
        record = TapRecord(
            character=character,
            position=(float(position[0]), float(position[1])),
            iteration=self.iteration,
        )
        self._records.setdefault(character, []).append(record)
        logger.debug(f"Recorded {character!r} at {record.position} (iteration {self.iteration})")
        return record

    def reset(self) -> None:
        self._records.clear()
        self.iteration = 1
