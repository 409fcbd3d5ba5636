import logging
import uuid
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from image_redirect.api.redirect import (
    extract_id_value,
    has_query_params,
    parse_id,
    resolve_image_url,
)
from image_redirect.api.resolver_cache import ResolverCache
from image_redirect.api.upstream import UpstreamClient
from image_redirect.shared import CANONICAL_QUERY, SESSION_ID_KEY

_log = logging.getLogger(__name__)


def get_resolver_cache(request: Request) -> ResolverCache:
    """The app-wide cache built by ``create_app``."""
    return request.app.state.resolver_cache


def get_upstream(request: Request) -> UpstreamClient:
    """The upstream client opened in the app lifespan."""
    return request.app.state.upstream


def _touch_session(request: Request) -> None:
    # Identity only; nothing downstream reads it.
    if request.session.get(SESSION_ID_KEY) is None:
        request.session[SESSION_ID_KEY] = str(uuid.uuid4())


def create_router() -> APIRouter:
    """Create the image redirect router (GET /{device}/)."""
    router = APIRouter(tags=["redirect"])

    @router.get("/{device}/")
    async def redirect_image(
        device: str,
        request: Request,
        cache: ResolverCache = Depends(get_resolver_cache),
        upstream: UpstreamClient = Depends(get_upstream),
    ):
        """301 to the image for ``?<id>``; a bare ``/{device}/`` goes to ``?0`` first.

        Upstream and id errors propagate as ``RedirectError`` and are rendered
        by the app's exception handler.
        """
        query = request.url.query
        if not has_query_params(query):
            canonical = f"/{quote(device, safe='')}/?{CANONICAL_QUERY}"
            _log.debug(f"redirect to canonical {device=} location={canonical}")
            return RedirectResponse(canonical, status_code=301)

        image_id = parse_id(extract_id_value(query))
        _touch_session(request)
        url = await resolve_image_url(cache, upstream, device, image_id)
        _log.info(f"redirect {device=} id={image_id} location={url}")
        return RedirectResponse(url, status_code=301)

    return router
