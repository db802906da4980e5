"""Typed configuration for conference-companion.

Builds composed, frozen dataclasses from a plain mapping or a TOML file and
exposes them with sensible defaults.  The configuration is passed explicitly
to :class:`~conference_companion.client.CMSClient` and the assemblers; nothing
here is global.

Usage::

    from conference_companion.settings import load_config

    config = load_config("companion.toml")
    config.cms.base_url
    config.content_types.sponsor_types
    config.event_kinds.session
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True, slots=True)
class CMSConfig:
    """WordPress REST API configuration."""

    base_url: str = "https://example.org"
    timeout: float = 30
    per_page: int = 100


@dataclass(frozen=True, slots=True)
class ContentTypesConfig:
    """REST collection slugs for each content type consumed."""

    events: str = "events"
    presenters: str = "presenter"
    sponsorships: str = "sponsorships"
    sponsor_types: tuple[str, ...] = ("tribal_offices", "casinos", "associate_members")


@dataclass(frozen=True, slots=True)
class TaxonomyConfig:
    """Taxonomy names read from embedded ``wp:term`` data."""

    event_kind: str = "wigc-event-type"
    room: str = "room"
    track: str = "track"


@dataclass(frozen=True, slots=True)
class EventKindsConfig:
    """Event-kind term slugs that split the schedule into sessions and socials."""

    session: str = "sessions"
    social: str = "socials"


@dataclass(frozen=True, slots=True)
class SponsorGroupDefinition:
    """A named sponsor group backed by one sponsorship post."""

    label: str
    slug: str


@dataclass(frozen=True, slots=True)
class CompanionConfig:
    """Top-level conference-companion configuration."""

    cms: CMSConfig = field(default_factory=CMSConfig)
    content_types: ContentTypesConfig = field(default_factory=ContentTypesConfig)
    taxonomies: TaxonomyConfig = field(default_factory=TaxonomyConfig)
    event_kinds: EventKindsConfig = field(default_factory=EventKindsConfig)
    sponsor_groups: tuple[SponsorGroupDefinition, ...] = ()
    timezone: str = "UTC"
    conference_year: int | None = None
    default_duration_minutes: int = 60

    @property
    def tzinfo(self) -> ZoneInfo:
        """Return the conference timezone as a :class:`~zoneinfo.ZoneInfo`."""
        return ZoneInfo(self.timezone)


def _require_mapping(value: object, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        msg = f"{label} must be a mapping (dict-like object)"
        raise TypeError(msg)
    return value


def _sponsor_groups(raw: object) -> tuple[SponsorGroupDefinition, ...]:
    """Build sponsor group definitions from a list of mappings.

    Args:
        raw: A list of ``{"label": ..., "slug": ...}`` mappings.

    Returns:
        A tuple of :class:`SponsorGroupDefinition` in configured order.

    Raises:
        TypeError: If *raw* is not a list of mappings.
        ValueError: If a group is missing its label or slug, or slugs repeat.
    """
    if not isinstance(raw, (list, tuple)):
        msg = "companion.sponsor_groups must be a list"
        raise TypeError(msg)

    groups: list[SponsorGroupDefinition] = []
    seen: set[str] = set()
    for idx, item in enumerate(raw):
        item = _require_mapping(item, f"companion.sponsor_groups[{idx}]")
        label = item.get("label")
        slug = item.get("slug")
        if not isinstance(label, str) or not label.strip():
            msg = f"companion.sponsor_groups[{idx}].label must be a non-empty string"
            raise ValueError(msg)
        if not isinstance(slug, str) or not slug.strip():
            msg = f"companion.sponsor_groups[{idx}].slug must be a non-empty string"
            raise ValueError(msg)
        if slug in seen:
            msg = f"companion.sponsor_groups has duplicate slug: {slug}"
            raise ValueError(msg)
        seen.add(slug)
        groups.append(SponsorGroupDefinition(label=label.strip(), slug=slug.strip()))
    return tuple(groups)


def config_from_mapping(raw: Mapping[str, Any]) -> CompanionConfig:
    """Build and validate a :class:`CompanionConfig` from a plain mapping.

    Nested tables (``cms``, ``content_types``, ``taxonomies``,
    ``event_kinds``) map onto their dataclasses; ``sponsor_groups`` is a list
    of ``{label, slug}`` mappings.  Remaining keys are passed to
    :class:`CompanionConfig` directly.

    Args:
        raw: The configuration mapping.

    Returns:
        A frozen :class:`CompanionConfig`.

    Raises:
        TypeError: If a section has the wrong shape or an unknown key is given.
        ValueError: If a value is out of range.
    """
    raw_data = dict(_require_mapping(raw, "companion"))

    cms_data = _require_mapping(raw_data.pop("cms", {}), "companion.cms")
    types_data = dict(_require_mapping(raw_data.pop("content_types", {}), "companion.content_types"))
    taxonomy_data = _require_mapping(raw_data.pop("taxonomies", {}), "companion.taxonomies")
    kinds_data = _require_mapping(raw_data.pop("event_kinds", {}), "companion.event_kinds")
    groups = _sponsor_groups(raw_data.pop("sponsor_groups", []))

    if "sponsor_types" in types_data:
        if not isinstance(types_data["sponsor_types"], (list, tuple)):
            msg = "companion.content_types.sponsor_types must be a list"
            raise TypeError(msg)
        types_data["sponsor_types"] = tuple(types_data["sponsor_types"])

    config = CompanionConfig(
        cms=CMSConfig(**dict(cms_data)),
        content_types=ContentTypesConfig(**types_data),
        taxonomies=TaxonomyConfig(**dict(taxonomy_data)),
        event_kinds=EventKindsConfig(**dict(kinds_data)),
        sponsor_groups=groups,
        **raw_data,
    )
    _validate_config(config)
    return config


def load_config(path: str | Path) -> CompanionConfig:
    """Load and validate a companion TOML configuration file.

    Args:
        path: Filesystem path to the TOML file.  Settings live under a
            ``[companion]`` table.

    Returns:
        A frozen :class:`CompanionConfig`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is not valid TOML, the ``[companion]`` table
            is missing, or a value is invalid.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Companion config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as fh:
        try:
            data: dict[str, Any] = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {path}: {exc}"
            raise ValueError(msg) from exc

    if "companion" not in data:
        msg = "Missing required [companion] table in config file"
        raise ValueError(msg)

    return config_from_mapping(data["companion"])


def _validate_config(config: CompanionConfig) -> None:
    """Validate high-impact configuration values with clear error messages."""
    if not isinstance(config.cms.base_url, str) or not config.cms.base_url.startswith(("http://", "https://")):
        msg = "companion.cms.base_url must be an http(s) URL"
        raise ValueError(msg)
    if not isinstance(config.cms.per_page, int) or not 1 <= config.cms.per_page <= 100:  # noqa: PLR2004
        msg = "companion.cms.per_page must be an integer between 1 and 100"
        raise ValueError(msg)
    if not isinstance(config.cms.timeout, (int, float)) or config.cms.timeout <= 0:
        msg = "companion.cms.timeout must be a positive number"
        raise ValueError(msg)
    if not config.content_types.sponsor_types or not all(
        isinstance(t, str) and t for t in config.content_types.sponsor_types
    ):
        msg = "companion.content_types.sponsor_types must be a non-empty list of strings"
        raise ValueError(msg)
    if not isinstance(config.default_duration_minutes, int) or config.default_duration_minutes <= 0:
        msg = "companion.default_duration_minutes must be a positive integer"
        raise ValueError(msg)
    if config.conference_year is not None and (
        not isinstance(config.conference_year, int) or config.conference_year < 1
    ):
        msg = "companion.conference_year must be a positive integer"
        raise ValueError(msg)
    try:
        ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as exc:
        msg = f"companion.timezone is not a known IANA timezone: {config.timezone!r}"
        raise ValueError(msg) from exc
