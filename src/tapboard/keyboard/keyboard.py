"""
Host-facing keyboard facade.

The host resolves its widgets to one of two entry points: taps on a static key
(``deliver_key_tap``) and taps on the learned Voronoi surface or the learn-mode
overlay (``deliver_surface_tap``). Results flow back through callbacks.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from .layout import StaticLayout, key_text
from ..data.store import LayoutStore
from ..diagnostics import DiagnosticCallback, DiagnosticKind, LayoutFormatError, report
from ..geometry.primitives import Bounds, Cell
from ..geometry.tessellator import PlanarTessellator
from ..learning.controller import LearnModeController, LearnState
from ..learning.statistics import KeyDescriptor, LayoutStatistics
from ..morph.adjuster import MorphAdjuster, MorphResult, apply
from ..utils.config import TapBoardConfig

Point = Tuple[float, float]


class KeyboardMode(Enum):
    DEFAULT = "default"
    MORPH = "morph"
    LEARN = "learn"


class AdaptiveKeyboard:
    """Wires learn mode, the Voronoi surface and morph mode behind one interface."""

    def __init__(
        self,
        config: Optional[TapBoardConfig] = None,
        on_character_resolved: Optional[Callable[[str], None]] = None,
        on_layout_ready: Optional[Callable[[List[Cell]], None]] = None,
        on_key_resized: Optional[Callable[[int, float], None]] = None,
        on_diagnostic: Optional[DiagnosticCallback] = None,
    ):
        """
        Initialize the keyboard.

        Args:
            config: Keyboard configuration; defaults are used if omitted
            on_character_resolved: Receives text to insert
            on_layout_ready: Receives cell polygons after every successful rebuild
            on_key_resized: Receives ``(key_index, new_width)`` for morph resizes
            on_diagnostic: Receives non-fatal diagnostics from every component
        """
        self.config = config if config is not None else TapBoardConfig()
        self.on_character_resolved = on_character_resolved
        self.on_layout_ready = on_layout_ready
        self.on_diagnostic = on_diagnostic

        metrics = self.config.metrics
        surface = self.config.tessellation

        self.static_layout = StaticLayout(surface.width, surface.height, metrics)
        self.tessellator = PlanarTessellator(
            Bounds.from_size(surface.width, surface.height),
            strategy=surface.strategy,
            resolution=surface.resolution,
            include_boundary_sites=surface.include_boundary_sites,
            boundary_margin=surface.boundary_margin,
            on_diagnostic=on_diagnostic,
        )
        self.learn = LearnModeController(
            phrase=self.config.learn.training_phrase,
            total_iterations=self.config.learn.total_iterations,
            statistics=LayoutStatistics(
                min_key_width=metrics.min_key_width,
                min_key_height=metrics.min_key_height,
                on_diagnostic=on_diagnostic,
            ),
            tessellator=self.tessellator,
            on_complete=self._on_learned,
            on_diagnostic=on_diagnostic,
        )
        self.morph = MorphAdjuster(
            edge_threshold=self.config.morph.edge_threshold,
            step=self.config.morph.step,
            min_width=metrics.min_key_width,
            on_key_resized=on_key_resized,
        )
        self.store = LayoutStore(on_diagnostic=on_diagnostic)

        self.mode = KeyboardMode.DEFAULT
        self.descriptors: Dict[str, KeyDescriptor] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def has_learned_layout(self) -> bool:
        return not self.tessellator.current.is_empty

    @property
    def cells(self) -> List[Cell]:
        return list(self.tessellator.current.cells)

    @property
    def target_character(self) -> Optional[str]:
        return self.learn.target_character

    @property
    def learn_state(self) -> LearnState:
        return self.learn.state

    def toggle_morph(self) -> KeyboardMode:
        """Switch between default and morph mode; ignored while learning."""
        if self.mode == KeyboardMode.LEARN:
            report(self.on_diagnostic, DiagnosticKind.INPUT_IGNORED, "Morph toggle ignored in learn mode")
        elif self.mode == KeyboardMode.MORPH:
            self.mode = KeyboardMode.DEFAULT
        else:
            self.mode = KeyboardMode.MORPH
        logger.info(f"Keyboard mode: {self.mode.value}")
        return self.mode

    def toggle_learn(self) -> KeyboardMode:
        """Start a training session, or stop the running one without learning."""
        if self.mode == KeyboardMode.MORPH:
            report(self.on_diagnostic, DiagnosticKind.INPUT_IGNORED, "Learn toggle ignored in morph mode")
        elif self.mode == KeyboardMode.LEARN:
            self.learn.cancel()
            self.mode = KeyboardMode.DEFAULT
        else:
            self.mode = KeyboardMode.LEARN
            self.learn.start()
        logger.info(f"Keyboard mode: {self.mode.value}")
        return self.mode

    def continue_learning(self) -> bool:
        return self.learn.on_continue()

    # ------------------------------------------------------------------
    # Input boundary
    # ------------------------------------------------------------------

    def deliver_key_tap(
        self,
        row_index: int,
        key_index: int,
        offset_from_center: float = 0.0,
        position: Optional[Point] = None,
    ) -> Optional[MorphResult]:
        """
        Handle a tap on a static key.

        Args:
            row_index: Row of the tapped key
            key_index: Index of the key within its row
            offset_from_center: Horizontal tap offset from the key center (morph mode)
            position: Tap location on the keyboard surface (learn mode)

        Returns:
            The applied resize in morph mode, otherwise None
        """
        if self.mode == KeyboardMode.LEARN:
            if position is None:
                report(self.on_diagnostic, DiagnosticKind.INPUT_IGNORED, "Learn-mode key tap without a position")
            else:
                self.learn.on_tap(position)
            return None

        if self.mode == KeyboardMode.MORPH:
            widths = self.static_layout.row_widths(row_index)
            result = self.morph.on_edge_tap(widths, key_index, offset_from_center)
            if result is not None:
                self.static_layout.set_row_widths(row_index, apply(widths, result))
            return result

        self._emit(key_text(self.static_layout.label(row_index, key_index)))
        return None

    def deliver_surface_tap(self, position: Point) -> Optional[str]:
        """
        Handle a tap on the learned surface or the learn-mode overlay.

        Returns:
            The resolved key in default mode, otherwise None
        """
        if self.mode == KeyboardMode.LEARN:
            self.learn.on_tap(position)
            return None

        if self.mode == KeyboardMode.MORPH:
            report(self.on_diagnostic, DiagnosticKind.INPUT_IGNORED, "Surface tap ignored in morph mode")
            return None

        key = self.tessellator.lookup(position)
        if key is None:
            report(self.on_diagnostic, DiagnosticKind.INPUT_IGNORED, f"No learned key near {position}")
            return None
        self._emit(key)
        return key

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load_layout(self, path: str) -> bool:
        """
        Rebuild the surface from a saved layout.

        On failure the learned surface is cleared and the static keys apply.

        Returns:
            True if at least one key was loaded
        """
        try:
            descriptors = self.store.load(path)
        except (FileNotFoundError, LayoutFormatError) as e:
            report(
                self.on_diagnostic,
                DiagnosticKind.PERSISTENCE_FAILURE,
                f"Falling back to the static layout: {e}",
                level="WARNING",
            )
            self.descriptors = {}
            self.tessellator.clear()
            return False

        self._install(descriptors)
        return bool(descriptors)

    def save_layout(self, path: str) -> None:
        self.store.save(self.descriptors, path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _emit(self, text: str) -> None:
        logger.debug(f"Resolved {text!r}")
        if self.on_character_resolved is not None:
            self.on_character_resolved(text)

    def _install(self, descriptors: Dict[str, KeyDescriptor]) -> None:
        self.descriptors = descriptors
        if not descriptors:
            self.tessellator.clear()
            return
        tessellation = self.tessellator.rebuild(descriptors)
        if self.on_layout_ready is not None:
            self.on_layout_ready(list(tessellation.cells))

    def _on_learned(self, descriptors: Dict[str, KeyDescriptor]) -> None:
        # The controller has already rebuilt the tessellator
        self.descriptors = descriptors
        self.mode = KeyboardMode.DEFAULT
        if descriptors and self.on_layout_ready is not None:
            self.on_layout_ready(self.cells)
        if self.config.layout_path and descriptors:
            try:
                self.save_layout(self.config.layout_path)
            except OSError as e:
                # The learned surface stays installed; only the file is missing
                report(
                    self.on_diagnostic,
                    DiagnosticKind.PERSISTENCE_FAILURE,
                    f"Could not save learned layout to {self.config.layout_path}: {e}",
                    level="WARNING",
                )
