"""In-memory filtering and day sectioning of assembled events.

Everything here works on already-assembled :class:`Event` lists and makes
no requests.
"""

import enum
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from conference_companion.adapters.text import renderable_text
from conference_companion.models import Event, ScheduleSnapshot
from conference_companion.settings import EventKindsConfig

ALL_TRACKS = "all"
ALL_TRACKS_LABEL = "All tracks"
TRACK_PLACEHOLDER = "-"
UNDATED_SECTION_TITLE = "Schedule"

_SPEAKER_LINE_PREFIXES = ("speakers:", "speaker:")
_DEFAULT_KINDS = EventKindsConfig()


class ScheduleView(enum.StrEnum):
    """Schedule tabs, each selecting a different base event list."""

    ALL = "all"
    MINE = "mine"
    SESSIONS = "sessions"
    SOCIALS = "socials"

    @property
    def supports_track_filter(self) -> bool:
        return self in (ScheduleView.SESSIONS, ScheduleView.MINE)


@dataclass(frozen=True, slots=True)
class ScheduleSection:
    """One day of the schedule list.

    Attributes:
        title: The day label (the event's date label, or ``"Schedule"``).
        data: The events of that day, in input order.
    """

    title: str
    data: tuple[Event, ...]


def clean_description(event: Event) -> str:
    """Return the event description as plain text without ``Speakers:`` lines."""
    plain = renderable_text(event.description or event.content_html)
    lines = [
        line for line in plain.split("\n") if not line.strip().lower().startswith(_SPEAKER_LINE_PREFIXES)
    ]
    return "\n".join(lines).strip()


def _haystack(event: Event) -> str:
    parts = [
        event.title,
        event.track,
        event.room,
        event.date,
        *(speaker.name for speaker in event.speakers),
        event.moderator.name if event.moderator else None,
        clean_description(event),
    ]
    return " ".join(part for part in parts if part).lower()


def _is_track_filter_active(track_filter: str | None) -> bool:
    return bool(track_filter) and track_filter not in (ALL_TRACKS, ALL_TRACKS_LABEL)


def is_past(event: Event, now: datetime) -> bool:
    """Return whether *event* has ended at *now*.

    Events without a parseable start are never past.
    """
    if event.end_key is None:
        return False
    return event.end_key <= int(now.timestamp() * 1000)


def filter_events(
    events: Iterable[Event],
    *,
    search: str = "",
    track_filter: str | None = None,
    show_past: bool = False,
    now: datetime | None = None,
) -> list[Event]:
    """Apply the past-event, track and search filters together.

    Args:
        events: Events to filter, in display order.
        search: Case-insensitive substring matched against title, track,
            room, date label, speaker and moderator names and the plain-text
            description.  Blank matches everything.
        track_filter: Exact, case-sensitive track to keep.  ``None``, ``""``,
            ``"all"`` and ``"All tracks"`` disable the filter.
        show_past: Keep events that have already ended.
        now: Reference instant for the past filter; an aware datetime.
            Defaults to the current time.

    Returns:
        The events passing every active filter, order preserved.
    """
    now = now or datetime.now(tz=UTC)
    query = search.strip().lower()
    track_active = _is_track_filter_active(track_filter)

    kept: list[Event] = []
    for event in events:
        if not show_past and is_past(event, now):
            continue
        if track_active and (event.track or "").strip() != track_filter:
            continue
        if query and query not in _haystack(event):
            continue
        kept.append(event)
    return kept


def section_by_day(events: Iterable[Event]) -> list[ScheduleSection]:
    """Group events into day sections.

    Dated events group by ``day_key``.  Each undated event gets its own
    section, keyed by its date label and ID, so undated events are never
    merged.  Dated sections come first in ascending day order, then undated
    sections ordered by title.

    Args:
        events: Events in display order.

    Returns:
        The day sections; every input event appears in exactly one.
    """
    dated: dict[int, tuple[str, list[Event]]] = {}
    undated: list[tuple[str, list[Event]]] = []
    for event in events:
        title = (event.date or "").strip() or UNDATED_SECTION_TITLE
        if event.day_key is None:
            undated.append((title, [event]))
            continue
        dated.setdefault(event.day_key, (title, []))[1].append(event)

    sections = [ScheduleSection(title=title, data=tuple(data)) for _, (title, data) in sorted(dated.items())]
    sections.extend(
        ScheduleSection(title=title, data=tuple(data)) for title, data in sorted(undated, key=lambda s: s[0])
    )
    return sections


def distinct_tracks(sessions: Iterable[Event]) -> list[str]:
    """Return the track picker options for the sessions list.

    Unique, non-blank track names excluding the ``"-"`` placeholder and any
    ``"all"``, sorted, after a leading ``"All tracks"`` option.
    """
    tracks = {
        track
        for track in ((event.track or "").strip() for event in sessions)
        if track and track != TRACK_PLACEHOLDER and track.lower() != ALL_TRACKS
    }
    return [ALL_TRACKS_LABEL, *sorted(tracks)]


def events_for_view(
    snapshot: ScheduleSnapshot,
    view: ScheduleView,
    favorite_ids: Collection[str | int] = (),
) -> list[Event]:
    """Select the base event list for a schedule tab.

    Favorites are compared as strings, matching how the attendee data
    backend stores event IDs.
    """
    if view is ScheduleView.SESSIONS:
        return list(snapshot.sessions)
    if view is ScheduleView.SOCIALS:
        return list(snapshot.socials)
    if view is ScheduleView.MINE:
        favorites = {str(fid) for fid in favorite_ids}
        return [event for event in snapshot.all_events if str(event.id) in favorites]
    return list(snapshot.all_events)


def my_schedule_count(favorite_ids: Collection[str | int]) -> int:
    """Return the number of distinct favorited event IDs."""
    return len({str(fid) for fid in favorite_ids})


def build_schedule_sections(
    snapshot: ScheduleSnapshot,
    view: ScheduleView = ScheduleView.ALL,
    *,
    favorite_ids: Collection[str | int] = (),
    search: str = "",
    track_filter: str | None = None,
    show_past: bool = False,
    now: datetime | None = None,
) -> list[ScheduleSection]:
    """Select, filter and section the events for one schedule tab.

    The track filter only applies to the sessions and "my schedule" tabs.
    """
    events = filter_events(
        events_for_view(snapshot, view, favorite_ids),
        search=search,
        track_filter=track_filter if view.supports_track_filter else None,
        show_past=show_past,
        now=now,
    )
    return section_by_day(events)


def is_social(event: Event, kinds: EventKindsConfig = _DEFAULT_KINDS) -> bool:
    """Return whether the event is a social (networking) event."""
    return event.is_kind(kinds.social)


def display_track(event: Event, kinds: EventKindsConfig = _DEFAULT_KINDS) -> str:
    """Track label for list rows; blank for socials and the ``"-"`` placeholder."""
    if is_social(event, kinds):
        return ""
    track = (event.track or "").strip()
    return "" if track == TRACK_PLACEHOLDER else track


def format_time_range(event: Event) -> str:
    """Format ``"<start>–<end>"``, or whichever of the two is present."""
    start = (event.start_time or "").strip()
    end = (event.end_time or "").strip()
    if start and end:
        return f"{start}–{end}"
    return start or end
