"""Coordinate mapping module for promptly.

Converts physical caret observations into clamped logical positions
for the overlay window, using per-display scale factors and bounds.

Public API:
    CoordinateMapper -- Physical to logical mapping with edge clamping
    DisplayLayout -- Configured displays answering nearest-point queries
    parse_observation -- Validate a raw watcher record
"""

from promptly.mapping.display import DisplayLayout
from promptly.mapping.mapper import CoordinateMapper, parse_observation

__all__ = ["CoordinateMapper", "DisplayLayout", "parse_observation"]
