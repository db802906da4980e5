"""Field accessors and priority-ordered fallback chains for WordPress posts.

Images, logos and descriptions each come from one of several places on a
post: an explicit ACF field, the embedded featured media (at one of several
rendition sizes), or the post body.  Each chain below is an ordered tuple of
accessors; :func:`first_of` returns the first non-empty result.
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

Post: TypeAlias = Mapping[str, Any]
Accessor: TypeAlias = Callable[[Post], str | None]


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def acf(post: Post) -> Mapping[str, Any]:
    """Return the post's ACF field mapping (``{}`` when absent or ``false``)."""
    return _mapping(post.get("acf"))


def rendered(value: Any) -> str:
    """Read a ``{"rendered": ...}`` field, accepting a plain string too."""
    if isinstance(value, Mapping):
        value = value.get("rendered")
    return value if isinstance(value, str) else ""


def non_empty_str(value: Any) -> str | None:
    """Return a stripped string, or ``None`` for blanks and non-strings."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def image_url(value: Any) -> str | None:
    """Read an ACF image field returned as a URL string or an image object."""
    if isinstance(value, Mapping):
        return non_empty_str(value.get("url")) or non_empty_str(value.get("source_url"))
    return non_empty_str(value)


def featured_media(post: Post) -> Mapping[str, Any]:
    """Return the first embedded ``wp:featuredmedia`` object, or ``{}``."""
    embedded = _mapping(post.get("_embedded"))
    media = embedded.get("wp:featuredmedia")
    if isinstance(media, list) and media:
        return _mapping(media[0])
    return {}


def embedded_terms(post: Post) -> list[Mapping[str, Any]]:
    """Flatten the embedded ``wp:term`` groups into one list of term objects."""
    embedded = _mapping(post.get("_embedded"))
    groups = embedded.get("wp:term")
    if not isinstance(groups, list):
        return []
    terms: list[Mapping[str, Any]] = []
    for group in groups:
        if isinstance(group, list):
            terms.extend(term for term in group if isinstance(term, Mapping))
    return terms


def media_source(post: Post) -> str | None:
    """Original upload URL of the featured media."""
    return non_empty_str(featured_media(post).get("source_url"))


def media_size(size: str) -> Accessor:
    """Build an accessor for one rendition size of the featured media."""

    def accessor(post: Post) -> str | None:
        details = _mapping(featured_media(post).get("media_details"))
        sizes = _mapping(details.get("sizes"))
        return non_empty_str(_mapping(sizes.get(size)).get("source_url"))

    accessor.__name__ = f"media_size_{size}"
    return accessor


def acf_field(name: str, reader: Callable[[Any], str | None] = non_empty_str) -> Accessor:
    """Build an accessor for one ACF field, read through *reader*."""

    def accessor(post: Post) -> str | None:
        return reader(acf(post).get(name))

    accessor.__name__ = f"acf_{name}"
    return accessor


def post_field(name: str) -> Accessor:
    """Build an accessor for a top-level post field."""

    def accessor(post: Post) -> str | None:
        return non_empty_str(post.get(name))

    accessor.__name__ = f"post_{name}"
    return accessor


def post_content(post: Post) -> str | None:
    """The rendered post body."""
    return non_empty_str(rendered(post.get("content")))


def first_of(chain: tuple[Accessor, ...], post: Post) -> str | None:
    """Evaluate *chain* in order and return the first non-empty value.

    Args:
        chain: Priority-ordered accessors.
        post: The raw post dict.

    Returns:
        The first value an accessor produced, or ``None``.
    """
    for accessor in chain:
        value = accessor(post)
        if value:
            return value
    return None


EVENT_COVER_IMAGE_CHAIN: tuple[Accessor, ...] = (
    acf_field("event_image", image_url),
    media_source,
    media_size("full"),
    media_size("large"),
    media_size("medium_large"),
    media_size("medium"),
)

EVENT_DESCRIPTION_CHAIN: tuple[Accessor, ...] = (
    acf_field("session-description"),
    acf_field("session_description"),
    acf_field("event_description"),
    acf_field("event-description"),
    post_content,
)

SPONSOR_LOGO_CHAIN: tuple[Accessor, ...] = (
    media_source,
    media_size("medium"),
    media_size("thumbnail"),
    acf_field("image", image_url),
    acf_field("logo", image_url),
)

SPONSOR_WEBSITE_CHAIN: tuple[Accessor, ...] = (
    acf_field("website"),
    post_field("website"),
)

PRESENTER_PHOTO_CHAIN: tuple[Accessor, ...] = (
    acf_field("presenterphoto", image_url),
    acf_field("presenter_photo_upload", image_url),
    media_source,
    media_size("medium"),
)
