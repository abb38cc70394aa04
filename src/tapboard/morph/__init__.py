"""Morph mode: edge-tap key resizing."""

from .adjuster import MorphAdjuster, MorphResult, adjust_edge, apply

__all__ = ["MorphAdjuster", "MorphResult", "adjust_edge", "apply"]
