"""Schedule, presenter and sponsor content for the conference companion app."""

from conference_companion.client import CMSClient
from conference_companion.exceptions import CMSError, CMSFetchError, FetchCancelledError
from conference_companion.models import Event, Presenter, ScheduleSnapshot, Sponsor, SponsorGroup
from conference_companion.schedule import ScheduleLoader, assemble_schedule
from conference_companion.settings import CompanionConfig, config_from_mapping, load_config
from conference_companion.sponsors import fetch_sponsor_groups

__all__ = [
    "CMSClient",
    "CMSError",
    "CMSFetchError",
    "CompanionConfig",
    "Event",
    "FetchCancelledError",
    "Presenter",
    "ScheduleLoader",
    "ScheduleSnapshot",
    "Sponsor",
    "SponsorGroup",
    "assemble_schedule",
    "config_from_mapping",
    "fetch_sponsor_groups",
    "load_config",
]
