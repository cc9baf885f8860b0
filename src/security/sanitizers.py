"""Sanitizers: pure transforms that strip or neutralize dangerous content.

Used standalone for display-safe rendering, or as a first pass before
re-validating salvageable fields.  Non-string input always yields ``""``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from src.models.validation import SanitizeOptions
from src.security.patterns import HTML_TAG
from src.security.rules import DESCRIPTION_RULE, EXCEPTION_CONTEXT_RULE, TRUNCATION_MARKER

_SPECIAL_CHARS = re.compile(r"[^\w\s\-_.,!?]")

# Elements removed together with their content
_DANGEROUS_ELEMENTS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"<{tag}[^>]*>.*?</{tag}>", re.IGNORECASE | re.DOTALL)
    for tag in ("script", "style", "iframe", "object", "embed")
)

# Attribute form: swallows the handler value up to the end of the tag
_EVENT_HANDLER_ATTRIBUTE = re.compile(r"\s*on\w+\s*=\s*[^>]*", re.IGNORECASE)

_EXCEPTION_CONTEXT_CHARS = re.compile(r"[<>\"'&\x00-\x1f\x7f]")
_EXCEPTION_CONTEXT_TOKENS: tuple[re.Pattern[str], ...] = (
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
)


def truncate(text: str, max_length: int) -> str:
    """Cut *text* to *max_length* characters, ending with ``...`` when shortened."""
    if len(text) <= max_length:
        return text
    return text[: max(max_length - len(TRUNCATION_MARKER), 0)] + TRUNCATION_MARKER


def sanitize_text(text: Any, options: SanitizeOptions | Mapping[str, Any] | None = None) -> str:
    """Sanitize *text* according to *options*.

    Trims whitespace, strips tags unless ``allow_html``, optionally drops
    characters outside word/space/``-_.,!?``, then truncates to
    ``max_length``.  Applying it twice with the same options gives the
    same result as applying it once.
    """
    if not isinstance(text, str) or not text:
        return ""

    opts = SanitizeOptions.coerce(options)
    sanitized = text

    if opts.trim_whitespace:
        sanitized = sanitized.strip()

    if not opts.allow_html:
        sanitized = HTML_TAG.sub("", sanitized)

    if opts.remove_special_chars:
        sanitized = _SPECIAL_CHARS.sub("", sanitized)

    # Stripping can expose new leading/trailing whitespace
    if opts.trim_whitespace:
        sanitized = sanitized.strip()

    if opts.max_length is not None and opts.max_length > 0:
        sanitized = truncate(sanitized, opts.max_length)

    return sanitized


def sanitize_description(description: Any) -> str:
    """Remove dangerous markup from a project description.

    Drops script/style/iframe/object/embed elements with their content,
    then event-handler attributes, then every remaining tag; trims and
    truncates to 1000 characters.
    """
    if not isinstance(description, str) or not description:
        return ""

    sanitized = description
    for element in _DANGEROUS_ELEMENTS:
        sanitized = element.sub("", sanitized)

    sanitized = _EVENT_HANDLER_ATTRIBUTE.sub("", sanitized)
    sanitized = HTML_TAG.sub("", sanitized)
    sanitized = sanitized.strip()

    return truncate(sanitized, DESCRIPTION_RULE.max_length)


def sanitize_exception_context(context: Any) -> str:
    """Make *context* safe to attach to an exception message.

    Truncates to 500 characters, deletes HTML-special and control
    characters, then deletes script schemes and event-handler prefixes
    until none remain.
    """
    if not isinstance(context, str) or not context:
        return ""

    sanitized = truncate(context.strip(), EXCEPTION_CONTEXT_RULE.max_length)
    sanitized = _EXCEPTION_CONTEXT_CHARS.sub("", sanitized)

    # Deleting one token can join its neighbours into another
    previous = None
    while previous != sanitized:
        previous = sanitized
        for token in _EXCEPTION_CONTEXT_TOKENS:
            sanitized = token.sub("", sanitized)

    return sanitized


class OutputSanitizer:
    """Sanitizes nested payloads for display.

    Every string value inside dicts, lists and tuples is passed through
    ``sanitize_text`` with the configured options; other scalars and
    mapping keys are returned unchanged.

    Args:
        options: ``SanitizeOptions`` (or a mapping of them) applied to
                 every string.  Defaults to stripping all tags.
        active:  When ``False`` the payload is returned untouched.
    """

    def __init__(
        self,
        options: SanitizeOptions | Mapping[str, Any] | None = None,
        active: bool = True,
    ) -> None:
        self.options = SanitizeOptions.coerce(options)
        self.active = active

    def sanitize(self, data: Any) -> Any:
        """Return a sanitized copy of *data*."""
        if not self.active:
            return data
        return self._walk(data)

    def _walk(self, data: Any) -> Any:
        if isinstance(data, str):
            return sanitize_text(data, self.options)
        if isinstance(data, Mapping):
            return {key: self._walk(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self._walk(item) for item in data]
        if isinstance(data, tuple):
            return tuple(self._walk(item) for item in data)
        return data
