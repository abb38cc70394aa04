"""
Planar tessellation of the keyboard surface.

``PlanarTessellator`` owns the active ``Tessellation``: the sites derived from
the learned key centers, the Voronoi edges and cells used for drawing, and the
nearest-center lookup used at input time. Rebuilds replace the whole
tessellation at once; lookups never observe a half-built one.
"""

import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from .dense import clip_cells, nearest_site, rasterize
from .fortune import FortuneSweep
from .primitives import Bounds, Cell, Point, Site, VoronoiEdge
from ..diagnostics import DiagnosticCallback, DiagnosticKind, report
from ..learning.statistics import KeyDescriptor


STRATEGIES = ("sweep", "dense")

BOUNDARY_KEY = ""

# Relative slack allowed between the swept cell areas and the rectangle area
CELL_AREA_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Tessellation:
    """Immutable result of one rebuild."""

    bounds: Bounds
    sites: Tuple[Site, ...] = ()
    edges: Tuple[VoronoiEdge, ...] = ()
    cells: Tuple[Cell, ...] = ()
    strategy: str = "dense"
    labels: Optional[np.ndarray] = field(default=None, compare=False, repr=False)

    @property
    def selectable_sites(self) -> List[Site]:
        return [site for site in self.sites if site.selectable]

    @property
    def is_empty(self) -> bool:
        return not self.sites

    def lookup(self, point: Point) -> Optional[str]:
        """Key of the nearest selectable site, or None if there is none."""
        site = nearest_site(self.selectable_sites, point)
        return site.key if site is not None else None

    def cell_for(self, key: str) -> Optional[Cell]:
        for cell in self.cells:
            if cell.site.selectable and cell.site.key == key:
                return cell
        return None

    def rasterize(self, resolution: float = 1.0) -> np.ndarray:
        """Nearest-site label grid over all sites, indices into ``sites``."""
        return rasterize(self.sites, self.bounds, resolution)


def boundary_sites(bounds: Bounds, margin: float = 0.0) -> List[Site]:
    """Non-selectable sites on the rectangle's corners and edge midpoints."""
    cx = (bounds.x0 + bounds.x1) / 2
    cy = (bounds.y0 + bounds.y1) / 2
    sites = []
    for x, y in bounds.corners() + bounds.midpoints():
        # Push outward from the center
        dx = 0.0 if x == cx else (margin if x > cx else -margin)
        dy = 0.0 if y == cy else (margin if y > cy else -margin)
        sites.append(Site(BOUNDARY_KEY, x + dx, y + dy, selectable=False))
    return sites


def sites_from_descriptors(descriptors: Mapping[str, KeyDescriptor]) -> List[Site]:
    """One site per learned key, at the mean tap position."""
    return [Site(key, d.mean.x, d.mean.y) for key, d in descriptors.items()]


class PlanarTessellator:
    """Builds and serves the Voronoi partition of the keyboard rectangle."""

    def __init__(
        self,
        bounds: Bounds,
        strategy: str = "sweep",
        resolution: float = 1.0,
        include_boundary_sites: bool = False,
        boundary_margin: float = 0.0,
        on_diagnostic: Optional[DiagnosticCallback] = None,
    ):
        """
        Initialize the tessellator.

        Args:
            bounds: Keyboard rectangle to partition
            strategy: "sweep" for Fortune's algorithm, "dense" for the raster oracle
            resolution: Sample spacing of the dense label grid
            include_boundary_sites: Add non-selectable corner and midpoint sites
            boundary_margin: Outward offset of the boundary sites
            on_diagnostic: Optional callback for non-fatal conditions

        Raises:
            ValueError: If strategy is unknown or resolution is not positive
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy: {strategy}. Must be one of {STRATEGIES}")
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")

        self.bounds = bounds
        self.strategy = strategy
        self.resolution = resolution
        self.include_boundary_sites = include_boundary_sites
        self.boundary_margin = boundary_margin
        self.on_diagnostic = on_diagnostic

        self._lock = threading.RLock()
        self._current = Tessellation(bounds=bounds, strategy=strategy)

    @property
    def current(self) -> Tessellation:
        with self._lock:
            return self._current

    def lookup(self, point: Point) -> Optional[str]:
        """
        Resolve a tap to the nearest learned key.

        Hit testing always scans the sites by distance; the cell polygons are
        never consulted.
        """
        with self._lock:
            return self._current.lookup(point)

    def clear(self) -> None:
        with self._lock:
            self._current = Tessellation(bounds=self.bounds, strategy=self.strategy)

    def rebuild(
        self,
        source: Union[Mapping[str, KeyDescriptor], Iterable[Site]],
    ) -> Tessellation:
        """
        Replace the active tessellation.

        Args:
            source: Descriptor map (sites at the mean positions) or explicit sites

        Returns:
            The new tessellation
        """
        if isinstance(source, Mapping):
            sites = sites_from_descriptors(source)
        else:
            sites = list(source)

        with self._lock:
            tessellation = self.build(sites)
            self._current = tessellation
        return tessellation

    def prepare_sites(self, sites: Sequence[Site]) -> List[Site]:
        """Canonical ordering, coincident points removed, boundary sites appended."""
        ordered = sorted((s for s in sites if s.selectable), key=Site.sort_key)
        if self.include_boundary_sites:
            ordered.extend(boundary_sites(self.bounds, self.boundary_margin))

        unique: List[Site] = []
        seen = set()
        for site in ordered:
            if site.point in seen:
                report(
                    self.on_diagnostic,
                    DiagnosticKind.DEGENERATE_GEOMETRY,
                    f"Dropping site {site.key!r} at {site.point}: coincides with an earlier site",
                    level="WARNING" if site.selectable else "DEBUG",
                    key=site.key,
                )
                continue
            seen.add(site.point)
            unique.append(site)
        return unique

    def build(self, sites: Sequence[Site]) -> Tessellation:
        """Build a tessellation without installing it."""
        prepared = self.prepare_sites(sites)
        if not any(site.selectable for site in prepared):
            report(self.on_diagnostic, DiagnosticKind.EMPTY_INPUT, "No sites to tessellate")
            return Tessellation(bounds=self.bounds, strategy=self.strategy)

        labels = None
        edges: List[VoronoiEdge] = []
        if self.strategy == "dense":
            cells = clip_cells(prepared, self.bounds)
            labels = rasterize(prepared, self.bounds, self.resolution)
        else:
            edges, cells = self._sweep(prepared)

        logger.info(
            f"Built {self.strategy} tessellation: {len(prepared)} sites, "
            f"{len(edges)} edges, {len(cells)} cells"
        )
        return Tessellation(
            bounds=self.bounds,
            sites=tuple(prepared),
            edges=tuple(edges),
            cells=tuple(cells),
            strategy=self.strategy,
            labels=labels,
        )

    def _sweep(self, sites: Sequence[Site]) -> Tuple[List[VoronoiEdge], List[Cell]]:
        sweep = FortuneSweep(self.bounds, on_diagnostic=self.on_diagnostic)
        try:
            edges = sweep.compute(sites)
            cells = sweep.cells(sites, edges)
        except (ArithmeticError, ValueError) as e:
            report(
                self.on_diagnostic,
                DiagnosticKind.DEGENERATE_GEOMETRY,
                f"Sweep failed ({e}); using clipped cells instead",
                level="WARNING",
            )
            return [], clip_cells(sites, self.bounds)

        problem = self._check_cells(sites, cells)
        if problem is not None:
            report(
                self.on_diagnostic,
                DiagnosticKind.DEGENERATE_GEOMETRY,
                f"Sweep cells rejected ({problem}); using clipped cells instead",
                level="WARNING",
            )
            return [], clip_cells(sites, self.bounds)
        return edges, cells

    def _check_cells(self, sites: Sequence[Site], cells: Sequence[Cell]) -> Optional[str]:
        """Describe why swept cells do not partition the rectangle, or None if they do."""
        total = sum(cell.area for cell in cells)
        # Written so that a NaN area fails the check
        if not abs(total - self.bounds.area) <= CELL_AREA_TOLERANCE * self.bounds.area:
            return f"cell areas sum to {total}, expected {self.bounds.area}"
        for cell in cells:
            owner = nearest_site(sites, cell.centroid)
            if owner != cell.site:
                return f"centroid of the cell for {cell.site.key!r} is nearest to {owner}"
        return None
