"""Generation runs over one or more packages."""

from __future__ import annotations

from .debug import DEBUG_STATE_FILENAME, render_debug_state, write_debug_state
from .generator import Generator, PackageGenerationResult

__all__ = [
    "DEBUG_STATE_FILENAME",
    "Generator",
    "PackageGenerationResult",
    "render_debug_state",
    "write_debug_state",
]
