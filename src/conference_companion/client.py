"""HTTP client for the WordPress REST API backing the conference app.

Provides :class:`CMSClient` for fetching events, presenters, sponsors and
sponsorship-group posts from ``/wp-json/wp/v2/``.  Requests are asynchronous
(``httpx.AsyncClient``); list endpoints follow WordPress pagination through
the ``X-WP-TotalPages`` header and include-list requests are chunked to the
configured page size.

Responses are returned as typed dataclasses (:class:`Event`,
:class:`Presenter`, :class:`Sponsor`) rather than raw dicts.
"""

import asyncio
import contextlib
import logging
from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from conference_companion.adapters.relationships import (
    RelItem,
    coerce_post_id,
    normalize_rel_list,
    unique_ids,
)
from conference_companion.exceptions import CMSError, CMSFetchError, FetchCancelledError
from conference_companion.models import Event, Presenter, Sponsor
from conference_companion.settings import CompanionConfig

logger = logging.getLogger(__name__)

_TOTAL_PAGES_HEADER = "X-WP-TotalPages"


def _chunks(ids: Sequence[int], size: int) -> list[list[int]]:
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


class CMSClient:
    """Async client for the conference WordPress REST API.

    Args:
        config: Companion configuration (base URL, collection slugs,
            sponsor types, timezone).
        transport: Optional ``httpx`` transport, used by tests to serve
            canned responses.

    Example::

        client = CMSClient(load_config("companion.toml"))
        events = await client.fetch_events()
        presenters = await client.fetch_presenters_by_ids([12, 15])
    """

    def __init__(
        self,
        config: CompanionConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client for a WordPress site.

        Args:
            config: Companion configuration.
            transport: Optional ``httpx`` transport override.
        """
        self.config = config
        normalized_base_url = config.cms.base_url.rstrip("/")
        normalized_base_url = normalized_base_url.removesuffix("/wp/v2").removesuffix("/wp-json")
        self.base_url = normalized_base_url
        self.api_url = f"{self.base_url}/wp-json/wp/v2/"
        self.headers: dict[str, str] = {"Accept": "application/json"}
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.cms.timeout,
            headers=self.headers,
            transport=self._transport,
        )

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one GET request, raising :class:`CMSFetchError` on failure."""
        logger.debug("Fetching %s %s", url, params or "")
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"CMS API request failed: {exc.response.status_code} for URL {exc.request.url}"
            raise CMSFetchError(msg, url=str(exc.request.url), status_code=exc.response.status_code) from exc
        except httpx.RequestError as exc:
            msg = f"CMS API connection error for URL {url}: {exc}"
            raise CMSFetchError(msg, url=url) from exc
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """Decode a JSON body, raising :class:`CMSFetchError` when it is not JSON."""
        try:
            return response.json()
        except ValueError as exc:
            url = str(response.request.url)
            msg = f"CMS API returned a non-JSON body: {response.status_code} for URL {url}"
            raise CMSFetchError(msg, url=url, status_code=response.status_code) from exc

    async def get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """Fetch one endpoint relative to ``/wp-json/wp/v2/`` and decode it.

        Args:
            endpoint: Path relative to the API root (e.g. ``"presenter"``).
            params: Optional query parameters.

        Returns:
            The decoded JSON body.

        Raises:
            CMSFetchError: On a non-2xx response, a transport error, or a
                body that is not JSON.
        """
        url = f"{self.api_url}{endpoint}"
        async with self._client() as client:
            response = await self._get(client, url, params)
        return self._decode(response)

    async def _get_collection(self, endpoint: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Fetch a collection endpoint, dropping anything that is not a post object."""
        data = await self.get_json(endpoint, params)
        if not isinstance(data, list):
            logger.debug("Expected a list from %s, got %s", endpoint, type(data).__name__)
            return []
        return [item for item in data if isinstance(item, dict)]

    async def _get_all_pages(self, endpoint: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        """Fetch every page of a collection endpoint.

        Follows the ``X-WP-TotalPages`` header; a response without it is
        treated as the only page.

        Raises:
            CMSFetchError: If any page request fails.
        """
        url = f"{self.api_url}{endpoint}"
        results: list[dict[str, Any]] = []
        page = 1
        async with self._client() as client:
            while True:
                response = await self._get(client, url, {**params, "page": page})
                data = self._decode(response)
                if isinstance(data, list):
                    results.extend(item for item in data if isinstance(item, dict))
                try:
                    total_pages = int(response.headers.get(_TOTAL_PAGES_HEADER, "1"))
                except ValueError:
                    total_pages = 1
                if page >= total_pages:
                    break
                page += 1

        logger.debug("Collected %d results from %s", len(results), endpoint)
        return results

    def _include_params(self, ids: Iterable[int], *, embed: bool = True) -> dict[str, Any]:
        params: dict[str, Any] = {
            "per_page": self.config.cms.per_page,
            "include": ",".join(str(i) for i in ids),
        }
        if embed:
            params["_embed"] = 1
        return params

    async def fetch_events(self) -> list[Event]:
        """Fetch every event with embedded featured media and taxonomy terms.

        Returns:
            Unresolved :class:`Event` instances in API order.

        Raises:
            CMSFetchError: If the events collection cannot be fetched.
        """
        raw = await self._get_all_pages(
            self.config.content_types.events,
            {"per_page": self.config.cms.per_page, "_embed": 1},
        )
        return [Event.from_api(item, config=self.config) for item in raw]

    async def fetch_presenters_by_ids(self, ids: Iterable[int]) -> dict[int, Presenter]:
        """Fetch presenters by ID with one include-list request per page.

        Args:
            ids: Presenter post IDs; duplicates are ignored.

        Returns:
            A dict mapping presenter ID to :class:`Presenter`.  Empty input
            returns ``{}`` without a request.

        Raises:
            CMSFetchError: If a request fails.
        """
        unique = unique_ids(ids)
        if not unique:
            return {}

        presenters: dict[int, Presenter] = {}
        for batch in _chunks(unique, self.config.cms.per_page):
            items = await self._get_collection(
                self.config.content_types.presenters,
                self._include_params(batch, embed=False),
            )
            for item in items:
                presenter = Presenter.from_api(item)
                presenters[presenter.id] = presenter
        logger.debug("Resolved %d of %d presenters", len(presenters), len(unique))
        return presenters

    async def fetch_presenters(self) -> list[Presenter]:
        """Fetch every presenter profile.

        Raises:
            CMSFetchError: If the presenters collection cannot be fetched.
        """
        raw = await self._get_all_pages(
            self.config.content_types.presenters,
            {"per_page": self.config.cms.per_page, "_embed": 1},
        )
        return [Presenter.from_api(item) for item in raw]

    async def _fetch_sponsor_batch(self, sponsor_type: str, ids: list[int]) -> list[Sponsor]:
        """Fetch sponsors of one type by ID, degrading to ``[]`` on failure."""
        sponsors: list[Sponsor] = []
        for batch in _chunks(ids, self.config.cms.per_page):
            try:
                items = await self._get_collection(sponsor_type, self._include_params(batch))
            except CMSError as exc:
                logger.warning("Could not fetch %s sponsors: %s", sponsor_type, exc)
                return []
            sponsors.extend(Sponsor.from_api(item, sponsor_type=sponsor_type) for item in items)
        return sponsors

    async def fetch_sponsors_by_rel_items(self, items: Iterable[Any]) -> dict[str, Sponsor]:
        """Resolve sponsor relationship values into sponsors keyed by reference.

        Typed references are grouped by post type and fetched with one
        include-list request per type, concurrently.  A failing type resolves
        to nothing while the others still resolve.  Untyped bare IDs are
        resolved by probing every sponsor type
        (:meth:`fetch_event_sponsors_by_ids`).

        Args:
            items: Raw relationship values (post objects, bare IDs or
                :class:`RelItem`).

        Returns:
            A dict keyed by :attr:`RelItem.key`: ``"<type>:<id>"`` for typed
            references and the bare ID string for probed ones.
        """
        allowed = self.config.content_types.sponsor_types
        by_type: dict[str, list[int]] = {}
        untyped: list[int] = []
        for item in normalize_rel_list(list(items), allow_untyped=True):
            if item.type is None:
                untyped.append(item.id)
            elif item.type in allowed:
                by_type.setdefault(item.type, [])
                if item.id not in by_type[item.type]:
                    by_type[item.type].append(item.id)
            else:
                logger.debug("Skipping sponsor reference with unknown type %r", item.type)

        if not by_type and not untyped:
            return {}

        batches = await asyncio.gather(
            *(self._fetch_sponsor_batch(sponsor_type, ids) for sponsor_type, ids in by_type.items())
        )
        sponsor_map: dict[str, Sponsor] = {}
        for sponsors in batches:
            for sponsor in sponsors:
                sponsor_map[sponsor.key] = sponsor

        if untyped:
            for sponsor in await self.fetch_event_sponsors_by_ids(untyped):
                sponsor_map[str(sponsor.id)] = sponsor

        logger.debug("Resolved %d sponsors across %d types", len(sponsor_map), len(by_type))
        return sponsor_map

    async def _probe_sponsor_type(self, sponsor_type: str, ids: list[int]) -> list[Sponsor]:
        try:
            items = await self._get_collection(sponsor_type, self._include_params(ids))
        except CMSError as exc:
            logger.debug("Sponsor probe of %s failed: %s", sponsor_type, exc)
            return []
        return [Sponsor.from_api(item, sponsor_type=sponsor_type) for item in items]

    async def fetch_event_sponsors_by_ids(
        self,
        ids: Iterable[Any],
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[Sponsor]:
        """Resolve untyped sponsor IDs by probing every sponsor type at once.

        All configured sponsor types are queried in parallel with the same
        include list.  Results are merged by numeric ID (a later type in the
        configured order wins a collision) and returned in input-ID order;
        IDs no type knows are dropped.

        Args:
            ids: Sponsor post IDs (ints or numeric strings).
            cancel: Optional token; setting it aborts the in-flight requests.

        Returns:
            The resolved sponsors in input order.

        Raises:
            FetchCancelledError: If *cancel* is set before the probe finishes.
        """
        clean = unique_ids(post_id for post_id in (coerce_post_id(v) for v in ids) if post_id is not None)
        if not clean:
            return []
        if cancel is not None and cancel.is_set():
            msg = "Sponsor probe cancelled before it started"
            raise FetchCancelledError(msg)

        types = self.config.content_types.sponsor_types
        probe = asyncio.ensure_future(
            asyncio.gather(*(self._probe_sponsor_type(sponsor_type, clean) for sponsor_type in types))
        )
        if cancel is None:
            results = await probe
        else:
            waiter = asyncio.ensure_future(cancel.wait())
            try:
                await asyncio.wait({probe, waiter}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                waiter.cancel()
                aborted = not probe.done()
                if aborted:
                    probe.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await probe
            if aborted:
                msg = f"Sponsor probe for {len(clean)} IDs was cancelled"
                raise FetchCancelledError(msg)
            results = probe.result()

        merged: dict[int, Sponsor] = {}
        for sponsors in results:
            for sponsor in sponsors:
                merged[sponsor.id] = sponsor
        return [merged[post_id] for post_id in clean if post_id in merged]

    async def fetch_sponsorship_post(self, slug: str) -> dict[str, Any] | None:
        """Fetch a sponsorship-group post by slug.

        Returns:
            The raw post, or ``None`` when no post has that slug.

        Raises:
            CMSFetchError: If the request fails.
        """
        items = await self._get_collection(self.config.content_types.sponsorships, {"slug": slug})
        return items[0] if items else None

    async def fetch_single_sponsor(self, item: RelItem) -> Sponsor | None:
        """Fetch one typed sponsor reference from its detail endpoint.

        Returns:
            The sponsor, or ``None`` for untyped references and types outside
            the configured sponsor types.

        Raises:
            CMSFetchError: If the request fails.
        """
        if item.type is None or item.type not in self.config.content_types.sponsor_types:
            return None
        data = await self.get_json(f"{item.type}/{item.id}", {"_embed": 1})
        if not isinstance(data, dict):
            return None
        return Sponsor.from_api(data, sponsor_type=item.type)
