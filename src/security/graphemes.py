"""Grapheme-aware length counting.

Length limits on human-entered text are expressed in user-perceived
characters so that emoji sequences, flags and combining marks outside the
Basic Multilingual Plane neither bypass nor falsely trigger a limit.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import regex

logger = logging.getLogger("input_guard.graphemes")

_SUPPLEMENTARY_RE = re.compile(r"[\U00010000-\U0010FFFF]")
_GRAPHEME_RE = regex.compile(r"\X")


def has_supplementary_chars(text: str) -> bool:
    """Return ``True`` if *text* contains any code point above U+FFFF."""
    return bool(_SUPPLEMENTARY_RE.search(text))


def grapheme_length(text: Any) -> int:
    """Count user-perceived characters in *text*.

    BMP-only text takes the fast path and returns ``len(text)``.  Text with
    supplementary-plane characters is segmented into extended grapheme
    clusters.  Never raises: non-strings count as 0 and a segmentation
    failure falls back to ``len(text)``.
    """
    if not isinstance(text, str):
        return 0

    if not has_supplementary_chars(text):
        return len(text)

    try:
        return sum(1 for _ in _GRAPHEME_RE.finditer(text))
    except (regex.error, ValueError):
        logger.debug("Grapheme segmentation failed; falling back to code point count")
        return len(text)
