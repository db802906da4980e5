"""Typed dataclasses for WordPress schedule content.

Provides :class:`Event`, :class:`Presenter`, :class:`Sponsor`,
:class:`SponsorGroup` and :class:`ScheduleSnapshot` as frozen dataclasses.
Each ``from_api()`` classmethod maps a raw WordPress REST post (with ACF
fields and ``_embedded`` data) into the render-ready shape, applying the
fallback chains from :mod:`conference_companion.adapters.fields`.  Mapping
never raises on missing or mistyped fields; every accessor ends in a safe
default.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Self

from conference_companion.adapters.dates import (
    day_start,
    parse_event_end,
    parse_event_start,
    to_epoch_millis,
)
from conference_companion.adapters.fields import (
    EVENT_COVER_IMAGE_CHAIN,
    EVENT_DESCRIPTION_CHAIN,
    PRESENTER_PHOTO_CHAIN,
    SPONSOR_LOGO_CHAIN,
    SPONSOR_WEBSITE_CHAIN,
    acf,
    embedded_terms,
    first_of,
    non_empty_str,
    rendered,
)
from conference_companion.adapters.relationships import (
    RelItem,
    coerce_post_id,
    coerce_post_ids,
    first_post_id,
    normalize_rel_list,
    sponsor_key,
)
from conference_companion.adapters.text import decode_entities
from conference_companion.settings import CompanionConfig

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _rel_tuple(value: Any) -> tuple[Any, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if value in (None, "", False):
        return ()
    return (value,)


@dataclass(frozen=True, slots=True)
class Presenter:
    """A presenter (speaker or moderator) post.

    Attributes:
        id: WordPress post ID.
        name: Entity-decoded display name (the post title).
        first_name: ACF first name, used for alphabetical sorting.
        last_name: ACF last name, used for alphabetical sorting.
        title: Job title.
        org: Organization.
        bio_html: Biography with markup preserved.
        photo: Resolved photo URL, or ``None``.
        session_ids: Event IDs the presenter is linked to from their profile.
    """

    id: int
    name: str
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    org: str = ""
    bio_html: str = ""
    photo: str | None = None
    session_ids: tuple[int, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Self:
        """Construct a ``Presenter`` from a raw ``presenter`` post."""
        fields = acf(data)
        return cls(
            id=coerce_post_id(data.get("id")) or 0,
            name=decode_entities(rendered(data.get("title"))),
            first_name=_text(fields.get("first_name")),
            last_name=_text(fields.get("last_name")),
            title=decode_entities(_text(fields.get("presentertitle"))),
            org=decode_entities(_text(fields.get("presenterorg"))),
            bio_html=fields.get("bio") if isinstance(fields.get("bio"), str) else "",
            photo=first_of(PRESENTER_PHOTO_CHAIN, data),
            session_ids=tuple(coerce_post_ids(fields.get("sessions_speaker"))),
        )


@dataclass(frozen=True, slots=True)
class Sponsor:
    """A sponsor post from one of the sponsor content types.

    Identity is ``(type, id)``: numeric IDs repeat across post types.

    Attributes:
        id: WordPress post ID.
        type: The sponsor post type (REST collection slug).
        name: Entity-decoded display name.
        logo_url: Resolved logo URL, or ``None``.
        website: External website URL, or ``None``.
    """

    id: int
    type: str
    name: str
    logo_url: str | None = None
    website: str | None = None

    @property
    def key(self) -> str:
        """Composite ``"<type>:<id>"`` identity key."""
        return sponsor_key(self.type, self.id)

    @classmethod
    def from_api(cls, data: Mapping[str, Any], *, sponsor_type: str) -> Self:
        """Construct a ``Sponsor`` from a raw sponsor post.

        Args:
            data: A single post from a sponsor collection.
            sponsor_type: The collection the post was fetched from.

        Returns:
            A populated ``Sponsor`` instance.
        """
        return cls(
            id=coerce_post_id(data.get("id")) or 0,
            type=sponsor_type,
            name=decode_entities(rendered(data.get("title"))),
            logo_url=first_of(SPONSOR_LOGO_CHAIN, data),
            website=first_of(SPONSOR_WEBSITE_CHAIN, data),
        )


@dataclass(frozen=True, slots=True)
class SponsorGroup:
    """A labelled, ordered group of sponsors for the sponsors page."""

    label: str
    sponsors: tuple[Sponsor, ...] = ()


@dataclass(frozen=True, slots=True)
class Event:
    """A scheduled session or social.

    The ``speakers``, ``moderator`` and ``sponsors`` attributes are empty
    until the schedule assembler attaches resolved records with
    :meth:`with_relations`.

    Attributes:
        id: WordPress post ID.
        title: Entity-decoded title.
        date: The ACF date label as entered (e.g. ``"Monday, June 1"``).
        start_time: Free-text start time.
        end_time: Free-text end time.
        sort_key: Start instant in epoch milliseconds, or ``None``.
        day_key: Local midnight of the start day in epoch milliseconds, or
            ``None``.  Present exactly when ``sort_key`` is.
        end_key: End instant in epoch milliseconds, or ``None``.
        room: Room term name.
        track: Track term name, falling back to the ACF ``track`` field.
        kinds: Event-kind term slugs.
        speaker_ids: Presenter IDs in field order.
        moderator_id: Moderator presenter ID.
        sponsor_rel: Raw sponsor relationship values in field order.
        description: Entity-decoded description HTML.
        content_html: Same as ``description``; kept for detail views.
        cover_image_url: Resolved cover image URL, or ``None``.
    """

    id: int
    title: str
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    sort_key: int | None = None
    day_key: int | None = None
    end_key: int | None = None
    room: str | None = None
    track: str | None = None
    kinds: frozenset[str] = frozenset()
    speaker_ids: tuple[int, ...] = ()
    moderator_id: int | None = None
    sponsor_rel: tuple[Any, ...] = ()
    description: str = ""
    content_html: str = ""
    cover_image_url: str | None = None
    speakers: tuple[Presenter, ...] = field(default=(), compare=False)
    moderator: Presenter | None = field(default=None, compare=False)
    sponsors: tuple[Sponsor, ...] = field(default=(), compare=False)

    @property
    def sponsor_refs(self) -> list[RelItem]:
        """Sponsor references normalized, keeping untyped bare IDs."""
        return normalize_rel_list(list(self.sponsor_rel), allow_untyped=True)

    def is_kind(self, slug: str) -> bool:
        """Return whether the event carries the event-kind term *slug*."""
        return slug in self.kinds

    def with_relations(
        self,
        *,
        speakers: tuple[Presenter, ...],
        moderator: Presenter | None,
        sponsors: tuple[Sponsor, ...],
    ) -> Self:
        """Return a copy with resolved presenters and sponsors attached."""
        return replace(self, speakers=speakers, moderator=moderator, sponsors=sponsors)

    @classmethod
    def from_api(cls, data: Mapping[str, Any], *, config: CompanionConfig) -> Self:
        """Construct an ``Event`` from a raw event post.

        Computes ``sort_key``/``day_key``/``end_key`` from the ACF date and
        time labels, reads room, track and kinds from the embedded taxonomy
        terms, and resolves the cover image and description fallback chains.

        Args:
            data: A single post from the events collection, fetched with
                ``_embed``.
            config: Companion configuration (timezone, year, taxonomies).

        Returns:
            A populated, unresolved ``Event``.
        """
        fields = acf(data)
        date_label = non_empty_str(fields.get("event-date"))
        start_time = non_empty_str(fields.get("event-time-start"))
        end_time = non_empty_str(fields.get("event-time-end"))

        start = parse_event_start(
            date_label,
            start_time,
            tz=config.tzinfo,
            default_year=config.conference_year,
        )
        end = parse_event_end(
            start,
            end_time,
            default_duration=timedelta(minutes=config.default_duration_minutes),
        )
        if date_label and start is None:
            logger.debug("Unparseable date for event %s: %r %r", data.get("id"), date_label, start_time)

        taxonomies = config.taxonomies
        room: str | None = None
        track: str | None = None
        kinds: list[str] = []
        for term in embedded_terms(data):
            taxonomy = term.get("taxonomy")
            if not taxonomy:
                continue
            if taxonomy == taxonomies.event_kind and non_empty_str(term.get("slug")):
                kinds.append(term["slug"].strip())
            if taxonomy == taxonomies.room and room is None:
                room = decode_entities(non_empty_str(term.get("name")))
            if taxonomy == taxonomies.track and track is None:
                track = decode_entities(non_empty_str(term.get("name")))
        if not track:
            track = decode_entities(non_empty_str(fields.get("track"))) or None

        sponsor_rel = fields.get("sponsors")
        description = decode_entities(first_of(EVENT_DESCRIPTION_CHAIN, data) or "")

        return cls(
            id=coerce_post_id(data.get("id")) or 0,
            title=decode_entities(rendered(data.get("title"))),
            date=date_label,
            start_time=start_time,
            end_time=end_time,
            sort_key=to_epoch_millis(start),
            day_key=to_epoch_millis(day_start(start)),
            end_key=to_epoch_millis(end),
            room=room or None,
            track=track,
            kinds=frozenset(kinds),
            speaker_ids=tuple(coerce_post_ids(fields.get("speakers"))),
            moderator_id=first_post_id(fields.get("moderator")),
            sponsor_rel=_rel_tuple(sponsor_rel),
            description=description,
            content_html=description,
            cover_image_url=first_of(EVENT_COVER_IMAGE_CHAIN, data),
        )


@dataclass(frozen=True, slots=True)
class ScheduleSnapshot:
    """The assembled schedule returned by one load.

    Attributes:
        sessions: Sorted events carrying the session kind.
        socials: Sorted events carrying the social kind.
        all_events: Every event, sorted.
    """

    sessions: tuple[Event, ...] = ()
    socials: tuple[Event, ...] = ()
    all_events: tuple[Event, ...] = ()
