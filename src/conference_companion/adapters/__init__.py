"""Adapters for normalizing WordPress REST and ACF data.

This package provides helpers for HTML entity and markup handling,
relationship-field normalization, priority-ordered field fallback chains,
and date label parsing.
"""

from conference_companion.adapters.dates import parse_date_label, parse_event_start, parse_time_label
from conference_companion.adapters.relationships import RelItem, normalize_rel_item, normalize_rel_list
from conference_companion.adapters.text import decode_entities, excerpt, renderable_text, strip_markup

__all__ = [
    "RelItem",
    "decode_entities",
    "excerpt",
    "normalize_rel_item",
    "normalize_rel_list",
    "parse_date_label",
    "parse_event_start",
    "parse_time_label",
    "renderable_text",
    "strip_markup",
]
