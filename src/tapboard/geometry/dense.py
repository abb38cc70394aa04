"""
Dense nearest-center tessellation.

This is the reference strategy. ``rasterize`` labels every sample point of the
keyboard rectangle with its closest site, which is exact by construction.
``clip_cells`` produces the matching vector cells by cutting the rectangle with
one bisector half-plane per competing site.
"""

from typing import List, Optional, Sequence

import numpy as np

from .primitives import Bounds, Cell, Point, Site, bisector_halfplane, clip_polygon, convex_hull_order


def nearest_site(sites: Sequence[Site], point: Point) -> Optional[Site]:
    """
    Closest site to ``point``.

    Ties go to the earliest site in ``sites``; pass them in the canonical order.
    """
    best: Optional[Site] = None
    best_dist = float("inf")
    for site in sites:
        dist = site.distance_sq(point)
        if dist < best_dist:
            best_dist = dist
            best = site
    return best


def sample_grid(bounds: Bounds, resolution: float = 1.0):
    """Sample coordinates ``x0 + i*res`` and ``y0 + j*res`` covering the rectangle."""
    xs = bounds.x0 + np.arange(int(np.floor(bounds.width / resolution)) + 1) * resolution
    ys = bounds.y0 + np.arange(int(np.floor(bounds.height / resolution)) + 1) * resolution
    return xs, ys


def rasterize(sites: Sequence[Site], bounds: Bounds, resolution: float = 1.0) -> np.ndarray:
    """
    Label the rectangle's sample points with the index of their nearest site.

    Args:
        sites: Sites in canonical order; indices in the result refer to it
        bounds: Rectangle to cover
        resolution: Distance between neighbouring sample points

    Returns:
        Integer array of shape (rows, cols); -1 everywhere when there are no sites
    """
    xs, ys = sample_grid(bounds, resolution)
    if not sites:
        return np.full((len(ys), len(xs)), -1, dtype=np.int64)

    sx = np.array([site.x for site in sites], dtype=np.float64)[:, None, None]
    sy = np.array([site.y for site in sites], dtype=np.float64)[:, None, None]
    dx = xs[None, None, :] - sx
    dy = ys[None, :, None] - sy
    distances = dx * dx + dy * dy

    # argmin keeps the first minimum, matching the canonical tie-break
    return np.argmin(distances, axis=0).astype(np.int64)


def clip_cell(site: Site, sites: Sequence[Site], bounds: Bounds) -> Cell:
    """Rectangle cut down to the points closest to ``site``."""
    polygon: List[Point] = bounds.corners()
    for other in sites:
        if other == site:
            continue
        polygon = clip_polygon(polygon, *bisector_halfplane(site, other))
        if not polygon:
            break
    return Cell(site=site, vertices=tuple(convex_hull_order(polygon)))


def clip_cells(sites: Sequence[Site], bounds: Bounds) -> List[Cell]:
    """Half-plane clipped cell for every site; sites with empty cells are left out."""
    cells = []
    for site in sites:
        cell = clip_cell(site, sites, bounds)
        if len(cell.vertices) >= 3:
            cells.append(cell)
    return cells
