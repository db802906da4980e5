"""Presenter directory helpers: ordering, activity and search."""

from collections.abc import Iterable

from conference_companion.adapters.text import renderable_text
from conference_companion.models import Event, Presenter


def _presenter_sort_key(presenter: Presenter) -> tuple[str, str, str]:
    """Sort key: last name (or display name when missing), first name, display name."""
    name = presenter.name.strip().lower()
    last = presenter.last_name.strip().lower() or name
    return (last, presenter.first_name.strip().lower(), name)


def sort_presenters(presenters: Iterable[Presenter]) -> list[Presenter]:
    """Sort presenters alphabetically for the directory."""
    return sorted(presenters, key=_presenter_sort_key)


def active_presenter_ids(events: Iterable[Event]) -> set[int]:
    """Return the IDs of presenters who speak at or moderate any event."""
    ids: set[int] = set()
    for event in events:
        ids.update(event.speaker_ids)
        ids.update(speaker.id for speaker in event.speakers)
        if event.moderator_id is not None:
            ids.add(event.moderator_id)
    return ids


def filter_presenters(
    presenters: Iterable[Presenter],
    events: Iterable[Event],
    search: str = "",
) -> list[Presenter]:
    """Keep presenters on at least one event that match *search*.

    The search is a case-insensitive substring match over the name parts,
    title, organization and plain-text biography.
    """
    active = active_presenter_ids(events)
    query = search.strip().lower()

    kept: list[Presenter] = []
    for presenter in presenters:
        if presenter.id not in active:
            continue
        if query:
            haystack = " ".join(
                part
                for part in (
                    presenter.name,
                    presenter.first_name,
                    presenter.last_name,
                    presenter.title,
                    presenter.org,
                    renderable_text(presenter.bio_html),
                )
                if part
            ).lower()
            if query not in haystack:
                continue
        kept.append(presenter)
    return kept
