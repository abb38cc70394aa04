"""
Diagnostics reported by TapBoard components.

None of these conditions is fatal. Components handle them locally, log them and
optionally pass a ``Diagnostic`` to a host callback.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Dict, Any

from loguru import logger


class DiagnosticKind(Enum):
    INPUT_IGNORED = "input_ignored"
    DEGENERATE_GEOMETRY = "degenerate_geometry"
    EMPTY_INPUT = "empty_input"
    PERSISTENCE_FAILURE = "persistence_failure"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    detail: Dict[str, Any] = field(default_factory=dict)


DiagnosticCallback = Callable[[Diagnostic], None]


class LayoutFormatError(ValueError):
    """Raised when a persisted layout file cannot be read as a layout at all."""


def report(
    callback: Optional[DiagnosticCallback],
    kind: DiagnosticKind,
    message: str,
    level: str = "DEBUG",
    **detail: Any,
) -> Diagnostic:
    """Log a diagnostic and forward it to ``callback`` if one is set."""
    diagnostic = Diagnostic(kind=kind, message=message, detail=dict(detail))
    logger.opt(depth=1).log(level, f"[{kind.value}] {message}")
    if callback is not None:
        callback(diagnostic)
    return diagnostic
