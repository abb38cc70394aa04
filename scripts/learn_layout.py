"""
Simulated learning session for TapBoard.

Runs a full learn-mode session with taps jittered around the static key
centers, then writes the learned layout and its Voronoi cells.

Usage:
    python scripts/learn_layout.py --config configs/keyboard_config.yaml --output results/simulated --jitter 6
"""

import sys
import argparse
import json
from pathlib import Path

import numpy as np
from loguru import logger

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tapboard.keyboard import AdaptiveKeyboard, StaticLayout
from tapboard.learning import LearnState
from tapboard.utils.config import load_config
from tapboard.utils.logger import setup_logger


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Simulate a TapBoard learning session")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to keyboard configuration file (defaults are used if omitted)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="results/simulated",
        help="Output directory for the layout and cells"
    )
    parser.add_argument(
        "--jitter",
        type=float,
        default=6.0,
        help="Standard deviation of simulated taps around each key center"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed"
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default="INFO",
        help="Logging level"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    output_dir = Path(args.output)
    setup_logger(log_dir=str(output_dir / "log"), log_level=args.log_level)

    config = load_config(args.config)
    config.layout_path = str(output_dir / "keyboard_layout.json")

    surface = config.tessellation
    centers = StaticLayout(surface.width, surface.height, config.metrics).key_centers()
    rng = np.random.default_rng(args.seed)

    cells_out = []

    def on_layout_ready(cells):
        for cell in cells:
            cells_out.append({
                "key": cell.site.key,
                "selectable": cell.site.selectable,
                "vertices": [list(v) for v in cell.vertices],
            })

    keyboard = AdaptiveKeyboard(config, on_layout_ready=on_layout_ready)
    keyboard.toggle_learn()

    while keyboard.learn_state != LearnState.IDLE:
        target = keyboard.target_character
        if target is None:
            keyboard.continue_learning()
            continue
        cx, cy = centers[target]
        tap = (
            float(np.clip(cx + rng.normal(0, args.jitter), 0, surface.width)),
            float(np.clip(cy + rng.normal(0, args.jitter), 0, surface.height)),
        )
        keyboard.deliver_surface_tap(tap)

    cells_path = output_dir / "cells.json"
    with open(cells_path, 'w') as f:
        json.dump(cells_out, f, indent=2)
    logger.info(f"Cells saved to {cells_path}")

    for key, descriptor in sorted(keyboard.descriptors.items()):
        logger.info(
            f"{key!r}: mean=({descriptor.mean.x:.1f}, {descriptor.mean.y:.1f}) "
            f"n={descriptor.sample_count} accuracy={descriptor.accuracy:.0f}%"
        )


if __name__ == "__main__":
    main()
