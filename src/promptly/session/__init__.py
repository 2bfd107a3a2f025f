"""Overlay session module for promptly.

Contains the session state machine that owns all mutable overlay state
and the runtime that feeds it caret observations.

Public API:
    OverlaySession -- Analysis/sidebar state machine
    OverlayRuntime -- Owned lifecycle around one session
"""

from promptly.session.machine import OverlaySession
from promptly.session.runtime import OverlayRuntime

__all__ = ["OverlayRuntime", "OverlaySession"]
