"""
QuickStart example for TapBoard.

This script demonstrates:
1. A short learning session
2. Typing on the learned Voronoi surface
3. Morphing key widths on the static keyboard
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tapboard.keyboard import AdaptiveKeyboard
from tapboard.utils.config import TapBoardConfig, LearnConfig


def main():
    print("=" * 80)
    print("TapBoard QuickStart Example")
    print("=" * 80)

    typed = []
    config = TapBoardConfig(learn=LearnConfig(training_phrase="abc", total_iterations=2))
    keyboard = AdaptiveKeyboard(
        config,
        on_character_resolved=typed.append,
        on_layout_ready=lambda cells: print(f"  Layout ready with {len(cells)} cells"),
        on_key_resized=lambda index, width: print(f"  Key {index} is now {width:.1f} wide"),
    )

    print("\n1. Learning 'abc' twice...")
    taps = {"a": (60.0, 100.0), "b": (180.0, 110.0), "c": (300.0, 95.0)}
    keyboard.toggle_learn()
    for iteration in range(2):
        for char in "abc":
            x, y = taps[char]
            keyboard.deliver_surface_tap((x + iteration * 4, y - iteration * 2))
        keyboard.continue_learning()

    for key, descriptor in sorted(keyboard.descriptors.items()):
        print(f"  {key}: mean=({descriptor.mean.x:.1f}, {descriptor.mean.y:.1f}) "
              f"samples={descriptor.sample_count}")

    print("\n2. Typing on the learned surface...")
    for point in [(50.0, 90.0), (200.0, 150.0), (320.0, 20.0)]:
        keyboard.deliver_surface_tap(point)
    print(f"  Typed: {''.join(typed)!r}")

    print("\n3. Morphing the top row...")
    keyboard.toggle_morph()
    widths = keyboard.static_layout.row_widths(0)
    keyboard.deliver_key_tap(0, 0, offset_from_center=widths[0] / 2 - 1)
    print(f"  Row 0 widths: {[round(w, 1) for w in keyboard.static_layout.row_widths(0)]}")

    print("\n" + "=" * 80)
    print("QuickStart completed successfully!")
    print("=" * 80)


if __name__ == "__main__":
    main()
