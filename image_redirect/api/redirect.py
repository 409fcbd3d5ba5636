"""Id extraction and the cache-or-upstream resolution behind GET /{device}/."""

import logging
import re
from typing import Optional
from urllib.parse import unquote_plus

from image_redirect.api.errors import InvalidIdentifier
from image_redirect.api.resolver_cache import ResolverCache
from image_redirect.api.upstream import UpstreamClient
from image_redirect.shared import ID_MAX, ID_MIN

log = logging.getLogger(__name__)

_ID_RE = re.compile(r"[+-]?[0-9]+")
_ID_PARAM = "id"


def _query_pairs(query: str) -> list[tuple[str, Optional[str]]]:
    """Split a raw query string into (name, value) in literal order.

    A bare token (no ``=``) yields ``(token, None)``. Empty segments are dropped.
    """
    pairs = []
    for segment in query.split("&"):
        if not segment:
            continue
        name, sep, value = segment.partition("=")
        pairs.append((unquote_plus(name), unquote_plus(value) if sep else None))
    return pairs


def has_query_params(query: str) -> bool:
    return bool(_query_pairs(query))


def extract_id_value(query: str) -> str:
    """Pick the raw id string out of *query*.

    ``id=...`` wins when present; otherwise the first parameter is used. For a
    bare token like ``?5`` the token itself is the value. Empty -> ``"0"``.
    """
    pairs = _query_pairs(query)
    if not pairs:
        return "0"
    chosen = next((p for p in pairs if p[0] == _ID_PARAM and p[1] is not None), pairs[0])
    name, value = chosen
    raw = name if value is None else value
    return raw or "0"


def parse_id(raw: str) -> int:
    """Parse a base-10 signed 32-bit id; raise InvalidIdentifier otherwise."""
    if not _ID_RE.fullmatch(raw):
        raise InvalidIdentifier(f"not a number: {raw!r}")
    value = int(raw)
    if not ID_MIN <= value <= ID_MAX:
        raise InvalidIdentifier(f"out of range: {raw!r}")
    return value


async def resolve_image_url(
    cache: ResolverCache, upstream: UpstreamClient, device: str, image_id: int
) -> str:
    """Cached URL for *image_id*, else resolve via upstream and write through.

    The cache lock is released before the upstream call; concurrent misses for
    the same id may each call upstream and the last insert wins.
    """
    cached = cache.lookup(image_id)
    if cached is not None:
        log.debug("Cache hit id=%s", image_id)
        return cached

    log.debug("Cache miss id=%s device=%s", image_id, device)
    url = await upstream.resolve(device)
    cache.insert(image_id, url)
    return url
