"""Exceptions raised by smrec.

Unresolvable item or tag identifiers raise the built-in ``LookupError`` and
non-numeric ratings or weights raise ``TypeError``; only malformed arguments
get a dedicated type.
"""


class ArgumentError(ValueError):
    """An argument has the wrong length, shape or composition."""
