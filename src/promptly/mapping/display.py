"""Display layout used to resolve which monitor owns a caret position."""

from __future__ import annotations

import logging
from typing import Iterable

from promptly.config.settings import DisplayConfig
from promptly.domain.models import DisplayMetrics, DisplayRect

logger = logging.getLogger(__name__)


class DisplayLayout:
    """A fixed set of displays that answers nearest-display queries.

    The point and the display bounds are compared in the same coordinate
    space. A display containing the point wins; otherwise the display
    whose rectangle is closest to the point is returned, with ties going
    to the display listed first.
    """

    def __init__(self, displays: Iterable[DisplayMetrics]) -> None:
        self._displays = list(displays)
        if not self._displays:
            raise ValueError("DisplayLayout requires at least one display")

    @classmethod
    def from_config(cls, configs: Iterable[DisplayConfig]) -> DisplayLayout:
        return cls(
            DisplayMetrics(
                scale_factor=c.scale_factor,
                bounds=DisplayRect(x=c.x, y=c.y, width=c.width, height=c.height),
            )
            for c in configs
        )

    def nearest(self, x: float, y: float) -> DisplayMetrics:
        for display in self._displays:
            if display.bounds.contains(x, y):
                return display
        best = min(self._displays, key=lambda d: d.bounds.distance_to(x, y))
        logger.debug("Point (%s, %s) is off-screen, using nearest display %s", x, y, best.bounds)
        return best

    __call__ = nearest
