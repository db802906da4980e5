"""Text normalization helpers for WordPress rich-text fields.

WordPress returns titles and ACF text fields with HTML entities encoded
(``&amp;``, ``&#038;``, ``&#8217;``) and rich-text fields with markup.  These
helpers turn both into plain display text.  None of them raise: ``None`` and
non-string inputs degrade to an empty string or their ``str()`` form.
"""

import html
import re
from typing import Any

_STYLE_RE = re.compile(r"<style[\s\S]*?>[\s\S]*?</style>", re.IGNORECASE)
_SCRIPT_RE = re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE)
_BR_RE = re.compile(r"<\s*br\s*/?\s*>", re.IGNORECASE)
_P_CLOSE_RE = re.compile(r"<\s*/p\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

ELLIPSIS = "…"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def decode_entities(value: Any) -> str:
    """Decode named and numeric HTML character references.

    Args:
        value: A string possibly containing entities, or ``None``.

    Returns:
        The decoded string, or ``""`` for empty input.
    """
    text = _as_text(value)
    if not text:
        return ""
    return html.unescape(text)


def strip_markup(value: Any) -> str:
    """Strip HTML markup into plain text with paragraph breaks kept.

    ``<style>`` and ``<script>`` blocks are removed with their content,
    ``<br>`` becomes a newline and ``</p>`` a blank line.  Remaining tags are
    dropped, runs of three or more newlines collapse to two, and the result
    is stripped.

    Args:
        value: An HTML fragment, or ``None``.

    Returns:
        The plain-text rendering.
    """
    text = _as_text(value)
    if not text:
        return ""
    text = _STYLE_RE.sub("", text)
    text = _SCRIPT_RE.sub("", text)
    text = _BR_RE.sub("\n", text)
    text = _P_CLOSE_RE.sub("\n\n", text)
    text = _TAG_RE.sub("", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def renderable_text(value: Any) -> str:
    """Return CMS rich text as plain display text.

    Entities are decoded first so that encoded markup (``&lt;br&gt;``) is
    stripped too.
    """
    return strip_markup(decode_entities(value))


def excerpt(text: str, max_len: int = 180) -> str:
    """Truncate *text* to *max_len* characters plus an ellipsis.

    Text at or under the limit is returned unchanged.  Longer text is cut at
    exactly *max_len* characters (not on a word boundary), trailing
    whitespace is removed, and a single ``…`` is appended.

    Args:
        text: The text to shorten.
        max_len: Maximum number of characters kept before the ellipsis.

    Returns:
        The possibly truncated text.
    """
    text = _as_text(text)
    if len(text) <= max_len:
        return text
    return text[:max_len].rstrip() + ELLIPSIS
