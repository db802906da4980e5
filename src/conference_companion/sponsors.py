"""Sponsor group assembly for the sponsors page.

Each configured :class:`~conference_companion.settings.SponsorGroupDefinition`
points at one sponsorship post whose ``select_sponsors`` relationship field
lists the group's members across the sponsor post types.
"""

import asyncio
import logging

from conference_companion.adapters.fields import acf
from conference_companion.adapters.relationships import normalize_rel_list
from conference_companion.client import CMSClient
from conference_companion.exceptions import CMSError
from conference_companion.models import Sponsor, SponsorGroup
from conference_companion.settings import SponsorGroupDefinition

logger = logging.getLogger(__name__)

SPONSOR_GROUP_FIELD = "select_sponsors"


async def _resolve_group(client: CMSClient, group: SponsorGroupDefinition) -> SponsorGroup | None:
    """Resolve one group definition; ``None`` when it has no sponsors.

    Raises:
        CMSFetchError: If the sponsorship post lookup fails.
    """
    post = await client.fetch_sponsorship_post(group.slug)
    if post is None:
        logger.info("Sponsor group %r has no sponsorship post, skipping", group.slug)
        return None

    refs = normalize_rel_list(acf(post).get(SPONSOR_GROUP_FIELD), allow_untyped=True)
    if not refs:
        logger.debug("Sponsor group %r has no sponsor references", group.slug)
        return None

    sponsor_map = await client.fetch_sponsors_by_rel_items(refs)
    sponsors: list[Sponsor] = []
    seen: set[str] = set()
    for ref in refs:
        sponsor = sponsor_map.get(ref.key)
        if sponsor is None or sponsor.key in seen:
            continue
        seen.add(sponsor.key)
        sponsors.append(sponsor)

    if not sponsors:
        return None
    return SponsorGroup(label=group.label, sponsors=tuple(sponsors))


async def fetch_sponsor_groups(client: CMSClient) -> list[SponsorGroup]:
    """Resolve every configured sponsor group, in configured order.

    Groups whose post is missing, whose relationship field is empty, or whose
    sponsors all fail to resolve are left out.  A failed lookup skips only
    that group.

    Args:
        client: The CMS client to load through.

    Returns:
        The non-empty :class:`SponsorGroup` list.

    Raises:
        CMSError: If every group lookup failed, so no data could be loaded.
    """
    definitions = client.config.sponsor_groups
    if not definitions:
        return []

    results = await asyncio.gather(
        *(_resolve_group(client, group) for group in definitions),
        return_exceptions=True,
    )

    groups: list[SponsorGroup] = []
    errors: list[CMSError] = []
    for definition, result in zip(definitions, results, strict=True):
        if isinstance(result, CMSError):
            logger.warning("Could not load sponsor group %r: %s", definition.slug, result)
            errors.append(result)
        elif isinstance(result, BaseException):
            raise result
        elif result is not None:
            groups.append(result)

    if errors and len(errors) == len(definitions):
        raise errors[-1]

    logger.info("Loaded %d of %d sponsor groups", len(groups), len(definitions))
    return groups
