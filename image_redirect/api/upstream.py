"""Client for the upstream image-metadata API.

``GET {base_url}/{device}/?json`` answers with a fixed envelope::

    {"code": 200, "url": "https://...", "width": 1920, "height": 1080}

A response counts as a success only when the request completes, the body
decodes into that shape, and the embedded ``code`` is 200. The HTTP status of
the transport itself is not consulted. No retries.
"""

import logging
from urllib.parse import quote

import httpx
from pydantic import BaseModel, StrictInt, StrictStr, ValidationError

from image_redirect.api.errors import (
    UpstreamDecodeError,
    UpstreamLogicalError,
    UpstreamTransportError,
)
from image_redirect.shared import UPSTREAM_BASE_URL, UPSTREAM_OK_CODE

log = logging.getLogger(__name__)


class UpstreamImageRecord(BaseModel):
    code: StrictInt
    url: StrictStr
    width: StrictInt
    height: StrictInt


class UpstreamClient:
    """Resolves a device category to an image URL over a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = UPSTREAM_BASE_URL):
        self._client = client
        self.base_url = base_url.rstrip("/")

    def image_url_for(self, device: str) -> str:
        # device is one path segment; "?", "#" and "/" in it must not reshape the URL.
        return f"{self.base_url}/{quote(device, safe='')}/?json"

    async def fetch_record(self, device: str) -> UpstreamImageRecord:
        """GET and decode the upstream envelope for *device*. Does not check ``code``."""
        url = self.image_url_for(device)
        log.info("Fetching upstream image url=%s", url)
        try:
            resp = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning("Upstream request failed url=%s error=%r", url, exc)
            raise UpstreamTransportError(str(exc)) from exc

        try:
            return UpstreamImageRecord.model_validate_json(resp.content)
        except ValidationError as exc:
            log.warning(
                "Upstream response not decodable url=%s http_status=%s errors=%s",
                url,
                resp.status_code,
                exc.error_count(),
            )
            raise UpstreamDecodeError(str(exc)) from exc

    async def resolve(self, device: str) -> str:
        """Return the image URL for *device* or raise an ``UpstreamError`` subclass."""
        record = await self.fetch_record(device)
        if record.code != UPSTREAM_OK_CODE:
            log.warning("Upstream returned code=%s for device=%s", record.code, device)
            raise UpstreamLogicalError(f"upstream code {record.code}")
        return record.url
