"""Date and time parsing for event date labels.

Event dates are stored in ACF as display labels (``"Monday, June 1"``) and
times as free text (``"9:00 AM"``).  Only one shape is accepted:

* date: ``[<Weekday>, ]<Month> <Day>[, <Year>]`` with an English month name
  or three-letter abbreviation;
* time: ``H[:MM] AM|PM`` (``a.m.``/``p.m.`` allowed) or 24-hour ``HH:MM``.

A label without a year takes the configured conference year.  Anything else
yields ``None`` rather than a guessed date.
"""

import re
from datetime import date, datetime, time, timedelta, tzinfo

_MONTHS = {
    name: idx
    for idx, names in enumerate(
        (
            ("january", "jan"),
            ("february", "feb"),
            ("march", "mar"),
            ("april", "apr"),
            ("may",),
            ("june", "jun"),
            ("july", "jul"),
            ("august", "aug"),
            ("september", "sep", "sept"),
            ("october", "oct"),
            ("november", "nov"),
            ("december", "dec"),
        ),
        start=1,
    )
    for name in names
}

_WEEKDAY_PREFIX_RE = re.compile(r"^[A-Za-z]+,\s*")
_DATE_RE = re.compile(r"^(?P<month>[A-Za-z]+)\.?\s+(?P<day>\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(?P<year>\d{4}))?$")
_TIME_12H_RE = re.compile(r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[AaPp])\.?\s*[Mm]\.?$")
_TIME_24H_RE = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


def parse_date_label(label: str | None, *, default_year: int | None = None) -> date | None:
    """Parse an event date label into a :class:`~datetime.date`.

    Args:
        label: The label, e.g. ``"Monday, June 1"`` or ``"Jun 1, 2026"``.
        default_year: Year used when the label carries none.

    Returns:
        The parsed date, or ``None`` if the label does not match the accepted
        format, names an invalid day, or has no year and no default.
    """
    if not isinstance(label, str):
        return None
    cleaned = _WEEKDAY_PREFIX_RE.sub("", label.strip())
    match = _DATE_RE.match(cleaned)
    if match is None:
        return None
    month = _MONTHS.get(match["month"].lower())
    if month is None:
        return None
    year = int(match["year"]) if match["year"] else default_year
    if year is None:
        return None
    try:
        return date(year, month, int(match["day"]))
    except ValueError:
        return None


def parse_time_label(label: str | None) -> time | None:
    """Parse a free-text time such as ``"9:00 AM"`` or ``"13:30"``.

    Returns:
        The parsed time, or ``None`` when the text is blank or malformed.
    """
    if not isinstance(label, str):
        return None
    text = label.strip()
    if match := _TIME_12H_RE.match(text):
        hour = int(match["hour"])
        minute = int(match["minute"] or 0)
        if not 1 <= hour <= 12 or minute > 59:  # noqa: PLR2004
            return None
        hour %= 12
        if match["meridiem"].lower() == "p":
            hour += 12
        return time(hour, minute)
    if match := _TIME_24H_RE.match(text):
        hour = int(match["hour"])
        minute = int(match["minute"])
        if hour > 23 or minute > 59:  # noqa: PLR2004
            return None
        return time(hour, minute)
    return None


def parse_event_start(
    date_label: str | None,
    start_time: str | None,
    *,
    tz: tzinfo,
    default_year: int | None = None,
) -> datetime | None:
    """Combine a date label and start time into an aware start datetime.

    A missing start time means midnight.  A start time that is present but
    malformed fails the whole parse.

    Args:
        date_label: The event date label.
        start_time: The event start time text, or ``None``.
        tz: Timezone the labels are expressed in.
        default_year: Year for labels that omit it.

    Returns:
        The aware start datetime, or ``None``.
    """
    day = parse_date_label(date_label, default_year=default_year)
    if day is None:
        return None
    if start_time is None or not str(start_time).strip():
        return datetime.combine(day, time(0, 0), tzinfo=tz)
    start = parse_time_label(start_time)
    if start is None:
        return None
    return datetime.combine(day, start, tzinfo=tz)


def parse_event_end(
    start: datetime | None,
    end_time: str | None,
    *,
    default_duration: timedelta = timedelta(minutes=60),
) -> datetime | None:
    """Compute an event's end on the same calendar day as its start.

    Falls back to ``start + default_duration`` when the end time is missing,
    malformed, or earlier than the start.

    Returns:
        The end datetime, or ``None`` when there is no start.
    """
    if start is None:
        return None
    end = parse_time_label(end_time)
    if end is None:
        return start + default_duration
    end_dt = datetime.combine(start.date(), end, tzinfo=start.tzinfo)
    if end_dt < start:
        return start + default_duration
    return end_dt


def to_epoch_millis(value: datetime | None) -> int | None:
    """Convert an aware datetime to integer epoch milliseconds."""
    if value is None:
        return None
    return int(value.timestamp() * 1000)


def day_start(value: datetime | None) -> datetime | None:
    """Truncate an aware datetime to local midnight of the same day."""
    if value is None:
        return None
    return datetime.combine(value.date(), time(0, 0), tzinfo=value.tzinfo)
