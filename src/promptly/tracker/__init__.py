"""Caret Source module for promptly.

Adapts the external caret watcher into an asynchronous stream of raw
records. The abstract base class allows alternative sources (e.g. a
replayed log file in tests).

Public API:
    CaretSource -- Abstract base class
    ProcessCaretSource -- Watcher subprocess implementation
"""

from promptly.tracker.base import CaretSource, TrackerError

__all__ = ["CaretSource", "TrackerError", "ProcessCaretSource"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations."""
    if name == "ProcessCaretSource":
        from promptly.tracker.process import ProcessCaretSource
        return ProcessCaretSource
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
