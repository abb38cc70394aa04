"""
Learn-mode state machine.

A session walks the training phrase ``total_iterations`` times. Each tap is
recorded against the character under the phrase cursor; between passes the
controller pauses in ``TRANSITIONING`` until the host calls ``on_continue``.
After the last pass the taps are reduced to descriptors and, if a tessellator
is attached, the Voronoi surface is rebuilt.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional

from loguru import logger

from .collector import Point, SampleCollector
from .statistics import KeyDescriptor, LayoutStatistics
from ..diagnostics import DiagnosticCallback, DiagnosticKind, report

if TYPE_CHECKING:
    from ..geometry.tessellator import PlanarTessellator


class LearnState(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    TRANSITIONING = "transitioning"


@dataclass
class TrainingSession:
    """Cursor over the training phrase."""

    phrase: str
    phrase_index: int = 0
    iteration: int = 1
    total_iterations: int = 3
    is_transitioning: bool = False

    @property
    def current_character(self) -> Optional[str]:
        if self.phrase_index < len(self.phrase):
            return self.phrase[self.phrase_index]
        return None

    @property
    def is_complete(self) -> bool:
        return self.iteration > self.total_iterations


class LearnModeController:
    """Sequences training passes and triggers layout generation."""

    def __init__(
        self,
        phrase: str = "the quick brown fox jumps over the lazy dog",
        total_iterations: int = 3,
        collector: Optional[SampleCollector] = None,
        statistics: Optional[LayoutStatistics] = None,
        tessellator: Optional["PlanarTessellator"] = None,
        on_complete: Optional[Callable[[Dict[str, KeyDescriptor]], None]] = None,
        on_diagnostic: Optional[DiagnosticCallback] = None,
    ):
        """
        Initialize the controller.

        Args:
            phrase: Training phrase, walked one character at a time
            total_iterations: Number of passes over the phrase
            collector: Tap store; a fresh one is created if omitted
            statistics: Reducer run when the session completes
            tessellator: Rebuilt from the new descriptors on completion
            on_complete: Called with the new descriptors on completion
            on_diagnostic: Optional callback for ignored taps

        Raises:
            ValueError: If phrase is empty or total_iterations < 1
        """
        if not phrase:
            raise ValueError("Training phrase must not be empty")
        if total_iterations < 1:
            raise ValueError(f"total_iterations must be at least 1, got {total_iterations}")

        self.phrase = phrase
        self.total_iterations = total_iterations
        self.collector = collector if collector is not None else SampleCollector()
        self.statistics = statistics if statistics is not None else LayoutStatistics()
        self.tessellator = tessellator
        self.on_complete = on_complete
        self.on_diagnostic = on_diagnostic

        self.state = LearnState.IDLE
        self.session = TrainingSession(phrase=phrase, total_iterations=total_iterations)
        self.descriptors: Dict[str, KeyDescriptor] = {}

    @property
    def target_character(self) -> Optional[str]:
        """Character the user should tap next, or None outside collection."""
        if self.state != LearnState.COLLECTING:
            return None
        return self.session.current_character

    def start(self) -> None:
        """Begin a new session, discarding any previous taps."""
        self.collector.reset()
        self.session = TrainingSession(phrase=self.phrase, total_iterations=self.total_iterations)
        self.collector.set_iteration(self.session.iteration)
        self.state = LearnState.COLLECTING
        logger.info(f"Learn mode started: {len(self.phrase)} characters x {self.total_iterations} passes")

    def cancel(self) -> None:
        """Abort the session without computing statistics."""
        if self.state != LearnState.IDLE:
            logger.info(f"Learn mode cancelled during iteration {self.session.iteration}")
        self.collector.reset()
        self.session = TrainingSession(phrase=self.phrase, total_iterations=self.total_iterations)
        self.state = LearnState.IDLE

    def on_tap(self, position: Point) -> bool:
        """
        Record a training tap for the current phrase character.

        Taps outside ``COLLECTING`` are dropped, not queued.

        Returns:
            True if the tap was recorded
        """
        if self.state != LearnState.COLLECTING:
            report(
                self.on_diagnostic,
                DiagnosticKind.INPUT_IGNORED,
                f"Tap at {position} ignored while {self.state.value}",
                state=self.state.value,
            )
            return False

        session = self.session
        self.collector.record(session.current_character, position)
        session.phrase_index += 1

        if session.phrase_index >= len(session.phrase):
            session.phrase_index = 0
            if session.iteration < session.total_iterations:
                session.is_transitioning = True
                self.state = LearnState.TRANSITIONING
                logger.info(f"Iteration {session.iteration} of {session.total_iterations} complete")
            else:
                session.iteration += 1
                self._complete()
        return True

    def on_continue(self) -> bool:
        """
        Leave the pause between passes.

        Returns:
            True if the controller was transitioning
        """
        if self.state != LearnState.TRANSITIONING:
            report(
                self.on_diagnostic,
                DiagnosticKind.INPUT_IGNORED,
                f"Continue ignored while {self.state.value}",
                state=self.state.value,
            )
            return False

        session = self.session
        session.is_transitioning = False
        session.phrase_index = 0
        session.iteration += 1

        if session.is_complete:
            self._complete()
        else:
            self.collector.set_iteration(session.iteration)
            self.state = LearnState.COLLECTING
            logger.info(f"Starting iteration {session.iteration} of {session.total_iterations}")
        return True

    def _complete(self) -> None:
        self.state = LearnState.IDLE
        self.descriptors = self.statistics.compute(self.collector.records)
        logger.info(f"Learn mode finished with {len(self.descriptors)} learned keys")

        if self.tessellator is not None and self.descriptors:
            self.tessellator.rebuild(self.descriptors)
        if self.on_complete is not None:
            self.on_complete(self.descriptors)
