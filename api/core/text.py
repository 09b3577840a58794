"""
Text helpers for query building.
"""

from __future__ import annotations

import re

_PATTERN_SPECIALS = re.compile(r"[-\[\]{}()*+?.,\\^$|#\s]")


def escape_pattern(text: str) -> str:
    """
    Backslash-escape every regex metacharacter (and whitespace) in `text`.
    """
    return _PATTERN_SPECIALS.sub(lambda m: "\\" + m.group(0), text)
