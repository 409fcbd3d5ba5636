"""Request-terminating errors. Each maps to one HTTP status and one static body."""

from image_redirect.shared import (
    MSG_INVALID_ID,
    MSG_UPSTREAM_DECODE,
    MSG_UPSTREAM_LOGICAL,
    MSG_UPSTREAM_TRANSPORT,
)


class RedirectError(Exception):
    """Base for every error the redirect endpoint turns into a plain-text response."""

    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, detail: str | None = None):
        # detail is for logs only; clients always get the static message.
        super().__init__(detail or self.message)
        self.detail = detail


class InvalidIdentifier(RedirectError):
    status_code = 400
    message = MSG_INVALID_ID


class UpstreamError(RedirectError):
    """Upstream image API could not produce a URL. Never cached, never retried."""


class UpstreamTransportError(UpstreamError):
    message = MSG_UPSTREAM_TRANSPORT


class UpstreamDecodeError(UpstreamError):
    message = MSG_UPSTREAM_DECODE


class UpstreamLogicalError(UpstreamError):
    message = MSG_UPSTREAM_LOGICAL
