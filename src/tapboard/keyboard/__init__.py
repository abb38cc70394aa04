"""Host-facing keyboard: static grid and mode handling."""

from .layout import DEFAULT_ROWS, SPACEBAR, StaticLayout, key_text
from .keyboard import AdaptiveKeyboard, KeyboardMode

__all__ = [
    "DEFAULT_ROWS",
    "SPACEBAR",
    "StaticLayout",
    "key_text",
    "AdaptiveKeyboard",
    "KeyboardMode",
]
