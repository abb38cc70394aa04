"""Voronoi tessellation of the keyboard surface."""

from .primitives import Bounds, Site, VoronoiEdge, Cell
from .dense import rasterize, clip_cells, nearest_site
from .fortune import FortuneSweep
from .tessellator import PlanarTessellator, Tessellation, boundary_sites

__all__ = [
    "Bounds",
    "Site",
    "VoronoiEdge",
    "Cell",
    "rasterize",
    "clip_cells",
    "nearest_site",
    "FortuneSweep",
    "PlanarTessellator",
    "Tessellation",
    "boundary_sites",
]
