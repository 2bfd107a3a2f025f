"""Physical-to-logical caret coordinate mapping.

The external watcher reports caret positions in physical pixels. The
overlay window is positioned in logical pixels, so every observation is
divided by the scale factor of the display nearest to it and then
clamped so the widget keeps a fixed clearance from the right and bottom
screen edges.
"""

from __future__ import annotations

import json
import logging
from typing import Callable


from promptly.domain.models import CaretObservation, DisplayMetrics, LogicalPosition

logger = logging.getLogger(__name__)

DEFAULT_EDGE_CLEARANCE = 50.0

DisplayLookup = Callable[[float, float], DisplayMetrics]


def parse_observation(raw: str | bytes | dict) -> CaretObservation | None:
    """Validate one watcher record.

    Accepts a JSON line or an already decoded mapping. Anything that is
    not a complete, well-typed record yields None and is logged.
    """
    try:
        if isinstance(raw, dict):
            return CaretObservation.model_validate(raw)
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        text = text.strip()
        if not (text.startswith("{") and text.endswith("}")):
            logger.warning("Dropping non-JSON watcher output: %.120s", text)
            return None
        return CaretObservation.model_validate(json.loads(text))
    except (ValueError, RecursionError) as e:
        # ValueError covers JSONDecodeError and pydantic ValidationError.
        logger.warning("Dropping malformed caret observation: %s", e)
        return None


class CoordinateMapper:
    """Maps caret observations into clamped logical positions."""

    def __init__(
        self,
        display_lookup: DisplayLookup,
        edge_clearance: float = DEFAULT_EDGE_CLEARANCE,
    ) -> None:
        self._display_lookup = display_lookup
        self._edge_clearance = edge_clearance

    @property
    def edge_clearance(self) -> float:
        return self._edge_clearance

    def map(self, observation: CaretObservation) -> LogicalPosition:
        """Convert one observation into logical pixel space."""
        display = self._display_lookup(observation.physical_x, observation.physical_y)
        scale = display.scale_factor
        bounds = display.bounds

        logical_x = observation.physical_x / scale
        logical_y = observation.physical_y / scale
        logical_height = observation.physical_height / scale

        # Right/bottom first so a display narrower than the clearance
        # still resolves to its left/top edge.
        max_x = bounds.x + bounds.width - self._edge_clearance
        max_y = bounds.y + bounds.height - self._edge_clearance
        if logical_x > max_x:
            logical_x = max_x
        if logical_y > max_y:
            logical_y = max_y
        if logical_x < bounds.x:
            logical_x = bounds.x
        if logical_y < bounds.y:
            logical_y = bounds.y

        return LogicalPosition(
            x=logical_x,
            y=logical_y,
            height=logical_height,
            text=observation.text,
        )
