"""Work-order field detection and rule generation engine."""
from __future__ import annotations

from pathlib import Path

from . import (
    detector,
    errors,
    loader,
    normalize,
    patterns,
    registry,
    renderer,
    rules,
    scoring,
    targets,
    workorder,
)

__all__ = [
    "detector",
    "errors",
    "loader",
    "normalize",
    "patterns",
    "registry",
    "renderer",
    "rules",
    "scoring",
    "targets",
    "workorder",
    "inspect_file",
]


def inspect_file(path: Path) -> registry.DocumentSession:
    """Convenience wrapper: load ``path`` and run a detection pass."""
    document = loader.load_document(path)
    return registry.open_session(document.text, source=str(document.path))
