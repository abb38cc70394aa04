"""
Rebuild the Voronoi surface from a saved layout.

Loads a layout JSON written by a learning session, tessellates it with the
configured strategy (or both, with --compare) and reports the cells.

Usage:
    python scripts/build_layout.py --layout results/simulated/keyboard_layout.json --compare
"""

import sys
import argparse
from pathlib import Path

from loguru import logger

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tapboard.data.store import LayoutStore
from tapboard.geometry import Bounds, PlanarTessellator
from tapboard.learning import group_keys_into_rows
from tapboard.utils.config import load_config
from tapboard.utils.logger import setup_logger


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Tessellate a saved TapBoard layout")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to keyboard configuration file"
    )
    parser.add_argument(
        "--layout",
        type=str,
        required=True,
        help="Path to layout JSON file"
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help="Build with both strategies and report cell area differences"
    )
    return parser.parse_args()


def main():
    args = parse_args()
    setup_logger(log_dir=None, log_level="INFO")

    config = load_config(args.config)
    surface = config.tessellation
    bounds = Bounds.from_size(surface.width, surface.height)

    descriptors = LayoutStore().load(args.layout)
    if not descriptors:
        logger.error(f"No usable keys in {args.layout}")
        sys.exit(1)

    strategies = ["sweep", "dense"] if args.compare else [surface.strategy]
    areas = {}
    for strategy in strategies:
        tessellator = PlanarTessellator(
            bounds,
            strategy=strategy,
            resolution=surface.resolution,
            include_boundary_sites=surface.include_boundary_sites,
            boundary_margin=surface.boundary_margin,
        )
        tessellation = tessellator.rebuild(descriptors)
        areas[strategy] = {cell.site: cell.area for cell in tessellation.cells}
        logger.info(f"{strategy}: {len(tessellation.cells)} cells, {len(tessellation.edges)} edges")

    if args.compare:
        worst = max(
            abs(areas["sweep"].get(site, 0.0) - area)
            for site, area in areas["dense"].items()
        )
        logger.info(f"Largest cell area difference between strategies: {worst:.6f}")

    key_areas = {site.key: area for site, area in areas[strategies[0]].items() if site.selectable}
    rows = group_keys_into_rows(descriptors, tolerance=config.metrics.min_key_height)
    for index, row in enumerate(rows):
        cells = ", ".join(f"{key!r}={key_areas.get(key, 0.0):.0f}" for key in row)
        logger.info(f"Row {index}: {cells}")


if __name__ == "__main__":
    main()
