"""Normalization helpers for ACF relationship and post-object fields.

ACF returns relationship fields in several shapes depending on the field's
return format and on how the content was edited: full post objects
(``{"ID": 12, "post_type": "casinos", ...}``), bare integer IDs, numeric
strings, a single value where a list is expected, or ``""``/``False`` when
empty.  These helpers fold every shape into :class:`RelItem` or plain integer
IDs.  Resolution is lossy: anything that cannot be read is dropped, never
raised.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

_ID_KEYS = ("ID", "id")
_TYPE_KEYS = ("post_type", "type")


@dataclass(frozen=True, slots=True)
class RelItem:
    """A typed reference to another post.

    Attributes:
        id: The referenced post ID.
        type: The post type (REST collection slug), or ``None`` when the
            source field only carried a bare ID.
    """

    id: int
    type: str | None = None

    @property
    def key(self) -> str:
        """Composite lookup key, ``"<type>:<id>"`` or the bare ID when untyped."""
        if self.type:
            return sponsor_key(self.type, self.id)
        return str(self.id)


def sponsor_key(post_type: str, post_id: int) -> str:
    """Return the composite ``"<type>:<id>"`` key for a polymorphic reference.

    Numeric IDs are only unique within one post type, so sponsor lookups are
    always keyed by both.
    """
    return f"{post_type}:{post_id}"


def coerce_post_id(value: Any) -> int | None:
    """Read a positive post ID from an int, a numeric string, or a post object.

    Args:
        value: An int, a string of digits, a mapping carrying ``ID`` or
            ``id``, or anything else.

    Returns:
        The positive integer ID, or ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, RelItem):
        return value.id
    if isinstance(value, Mapping):
        for key in _ID_KEYS:
            post_id = coerce_post_id(value.get(key))
            if post_id is not None:
                return post_id
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdigit():
            return int(stripped) or None
    return None


def _as_list(raw: Any) -> list[Any]:
    """Flatten a singular-or-plural field value into a list."""
    if raw is None or raw == "" or raw is False:
        return []
    if isinstance(raw, (list, tuple)):
        flat: list[Any] = []
        for item in raw:
            if isinstance(item, (list, tuple)):
                flat.extend(_as_list(item))
            else:
                flat.append(item)
        return flat
    return [raw]


def normalize_rel_item(raw: Any) -> RelItem | None:
    """Normalize one relationship value into a :class:`RelItem`.

    Accepts a post object carrying its ID under ``ID`` or ``id`` and its type
    under ``post_type`` (or ``type``), a bare positive integer (type unknown,
    resolved later by probing every sponsor type), or an existing
    :class:`RelItem`.  Anything else yields ``None``.

    Args:
        raw: The relationship value.

    Returns:
        A :class:`RelItem`, or ``None`` when no ID can be read.
    """
    if isinstance(raw, RelItem):
        return raw
    if isinstance(raw, Mapping):
        post_id = coerce_post_id(raw)
        if post_id is None:
            return None
        post_type = next((raw[k] for k in _TYPE_KEYS if isinstance(raw.get(k), str) and raw[k]), None)
        return RelItem(id=post_id, type=post_type)
    if isinstance(raw, int) and not isinstance(raw, bool):
        return RelItem(id=raw) if raw > 0 else None
    return None


def normalize_rel_list(raw: Any, *, allow_untyped: bool = False) -> list[RelItem]:
    """Normalize a singular-or-plural relationship field into typed references.

    Order is preserved.  Items that cannot be read are dropped, as are
    untyped bare IDs unless *allow_untyped* is set.

    Args:
        raw: A single relationship value or a list of them.
        allow_untyped: Keep references whose type is unknown.

    Returns:
        A list of :class:`RelItem`.
    """
    items: list[RelItem] = []
    for value in _as_list(raw):
        item = normalize_rel_item(value)
        if item is None:
            continue
        if item.type is None and not allow_untyped:
            continue
        items.append(item)
    return items


def coerce_post_ids(raw: Any) -> list[int]:
    """Read a singular-or-plural post-object field as a list of positive IDs.

    Used for presenter fields (``speakers``) where only the ID matters.
    Order is preserved; duplicates are kept.
    """
    ids: list[int] = []
    for value in _as_list(raw):
        post_id = coerce_post_id(value)
        if post_id is not None:
            ids.append(post_id)
    return ids


def first_post_id(raw: Any) -> int | None:
    """Return the first positive ID of a singular-or-plural post-object field."""
    values = _as_list(raw)
    if not values:
        return None
    return coerce_post_id(values[0])


def unique_ids(ids: Iterable[int]) -> list[int]:
    """De-duplicate IDs keeping first-seen order."""
    return list(dict.fromkeys(ids))
