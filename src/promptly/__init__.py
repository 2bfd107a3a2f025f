"""promptly -- Caret-following prompt quality overlay.

This package watches the caret of the focused text field, maps its
physical screen position onto the logical coordinate space of an
always-on-top overlay, and drives a small analysis session that scores
the captured prompt and proposes an improved rewrite.
"""

__version__ = "0.1.0"
