"""Schedule assembly: events joined with presenters and sponsors.

:func:`assemble_schedule` fetches every event, collects presenter and
sponsor references across the whole list, resolves them with one bulk
request per collection (never one per event), attaches the resolved
records, sorts by start time and splits the result into sessions and
socials.

:class:`ScheduleLoader` wraps it with a generation counter so that a slow,
superseded load can never replace the snapshot of a later one.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping

from conference_companion.adapters.relationships import unique_ids
from conference_companion.client import CMSClient
from conference_companion.exceptions import CMSError
from conference_companion.models import Event, Presenter, ScheduleSnapshot, Sponsor
from conference_companion.settings import EventKindsConfig

logger = logging.getLogger(__name__)


def collect_presenter_ids(events: Iterable[Event]) -> list[int]:
    """Return every speaker and moderator ID across *events*, first-seen order."""
    ids: list[int] = []
    for event in events:
        ids.extend(event.speaker_ids)
        if event.moderator_id is not None:
            ids.append(event.moderator_id)
    return unique_ids(ids)


def collect_sponsor_refs(events: Iterable[Event]) -> list[object]:
    """Return every raw sponsor relationship value across *events*."""
    refs: list[object] = []
    for event in events:
        refs.extend(event.sponsor_rel)
    return refs


def attach_relations(
    event: Event,
    presenters: Mapping[int, Presenter],
    sponsors: Mapping[str, Sponsor],
) -> Event:
    """Attach resolved presenters and sponsors to one event.

    Speaker IDs are de-duplicated in order; IDs and sponsor references with
    no resolved record are dropped.

    Args:
        event: The unresolved event.
        presenters: Presenter lookup by ID.
        sponsors: Sponsor lookup by :attr:`RelItem.key`.

    Returns:
        A new :class:`Event` with ``speakers``, ``moderator`` and
        ``sponsors`` populated.
    """
    speakers = tuple(presenters[pid] for pid in unique_ids(event.speaker_ids) if pid in presenters)
    moderator = presenters.get(event.moderator_id) if event.moderator_id is not None else None

    resolved: list[Sponsor] = []
    seen: set[str] = set()
    for ref in event.sponsor_refs:
        sponsor = sponsors.get(ref.key)
        if sponsor is None or sponsor.key in seen:
            continue
        seen.add(sponsor.key)
        resolved.append(sponsor)

    return event.with_relations(speakers=speakers, moderator=moderator, sponsors=tuple(resolved))


def sort_events(events: Iterable[Event]) -> list[Event]:
    """Sort events by start instant; undated events follow in input order."""
    return sorted(events, key=lambda e: (e.sort_key is None, e.sort_key or 0))


def partition_events(events: list[Event], kinds: EventKindsConfig) -> ScheduleSnapshot:
    """Split sorted events into a :class:`ScheduleSnapshot`.

    An event lands in ``sessions`` and/or ``socials`` according to its kind
    slugs; ``all_events`` keeps every event.
    """
    return ScheduleSnapshot(
        sessions=tuple(e for e in events if e.is_kind(kinds.session)),
        socials=tuple(e for e in events if e.is_kind(kinds.social)),
        all_events=tuple(events),
    )


async def _presenters_or_empty(client: CMSClient, ids: list[int]) -> dict[int, Presenter]:
    if not ids:
        return {}
    try:
        return await client.fetch_presenters_by_ids(ids)
    except CMSError as exc:
        logger.warning("Could not fetch %d presenters, continuing without them: %s", len(ids), exc)
        return {}


async def _sponsors_or_empty(client: CMSClient, refs: list[object]) -> dict[str, Sponsor]:
    if not refs:
        return {}
    try:
        return await client.fetch_sponsors_by_rel_items(refs)
    except CMSError as exc:
        logger.warning("Could not resolve event sponsors, continuing without them: %s", exc)
        return {}


async def assemble_schedule(client: CMSClient) -> ScheduleSnapshot:
    """Load and assemble the full schedule.

    Presenter and sponsor resolution run concurrently and degrade to empty
    lookups on failure; only a failure to fetch the events themselves
    propagates.

    Args:
        client: The CMS client to load through.

    Returns:
        A new :class:`ScheduleSnapshot`.

    Raises:
        CMSFetchError: If the events collection cannot be fetched.
    """
    raw_events = await client.fetch_events()

    presenter_ids = collect_presenter_ids(raw_events)
    sponsor_refs = collect_sponsor_refs(raw_events)
    presenters, sponsors = await asyncio.gather(
        _presenters_or_empty(client, presenter_ids),
        _sponsors_or_empty(client, sponsor_refs),
    )

    attached = [attach_relations(event, presenters, sponsors) for event in raw_events]
    snapshot = partition_events(sort_events(attached), client.config.event_kinds)
    logger.info(
        "Assembled schedule: %d events (%d sessions, %d socials), %d presenters, %d sponsors",
        len(snapshot.all_events),
        len(snapshot.sessions),
        len(snapshot.socials),
        len(presenters),
        len(sponsors),
    )
    return snapshot


class ScheduleLoader:
    """Holds the current schedule snapshot and discards superseded loads.

    Each call to :meth:`load` takes the next generation number.  When a load
    finishes after a newer one was started, its result is dropped and the
    snapshot is left alone.

    Args:
        client: The CMS client to load through.
    """

    def __init__(self, client: CMSClient) -> None:
        self.client = client
        self.snapshot: ScheduleSnapshot | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """The generation number of the most recently started load."""
        return self._generation

    async def load(self) -> ScheduleSnapshot | None:
        """Assemble a fresh snapshot and publish it if still current.

        Returns:
            The new snapshot, or ``None`` when a later load superseded this
            one.

        Raises:
            CMSFetchError: If the events collection cannot be fetched.
        """
        self._generation += 1
        generation = self._generation
        snapshot = await assemble_schedule(self.client)
        if generation != self._generation:
            logger.debug("Discarding schedule load %d; load %d is newer", generation, self._generation)
            return None
        self.snapshot = snapshot
        return snapshot
