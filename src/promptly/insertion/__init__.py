"""Text insertion module for promptly.

Writes an accepted rewrite back into the control that owned the caret.
The abstract interface supports a local process backend (OS script)
and an HTTP backend (a helper service listening on localhost).

Public API:
    TextInserter -- Abstract base class
    ProcessTextInserter -- Spawns the configured inserter script
    HttpTextInserter -- Posts to an insertion service
"""

from promptly.insertion.base import InsertionError, TextInserter

__all__ = ["InsertionError", "TextInserter", "HttpTextInserter", "ProcessTextInserter"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "HttpTextInserter":
        from promptly.insertion.http_backend import HttpTextInserter
        return HttpTextInserter
    if name == "ProcessTextInserter":
        from promptly.insertion.process_backend import ProcessTextInserter
        return ProcessTextInserter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
