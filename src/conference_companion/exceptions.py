"""Exceptions raised by the CMS client and assemblers."""


class CMSError(RuntimeError):
    """Base class for CMS content errors."""


class CMSFetchError(CMSError):
    """A CMS request failed with a non-2xx status or a transport error.

    Attributes:
        status_code: The HTTP status, or ``None`` for connection errors.
        url: The requested URL.
    """

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FetchCancelledError(CMSError):
    """A cancellable fetch was aborted through its cancellation token."""
