"""Server-Sent Events streams that push refreshed lists on every change.

Each connection runs a LiveQuery: the list is fetched once on connect and
again whenever the change feed reports a write to the watched table.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from school_portal.logging_config import get_logger
from school_portal.models.event import Event
from school_portal.models.gallery_image import GalleryImage
from school_portal.models.news import NewsItem
from school_portal.models.site_section import SiteSection
from school_portal.services.change_feed import (
    ChangePredicate,
    LiveQuery,
    change_feed,
    column_equals,
    to_sse,
)
from school_portal.services.content_store import SqlContentStore, table_name
from school_portal.services.site_content_service import (
    SiteContentService,
    event_payload,
)
from school_portal.services.store_service import get_session_factory

router = APIRouter(prefix="/api/live", tags=["Live"])
logger = get_logger(__name__)

KEEPALIVE_SECONDS = 15.0

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _dump(rows) -> List[Dict[str, Any]]:
    return [row.model_dump(mode="json") for row in rows]


def live_stream_response(
    request: Request,
    table: str,
    fetch: Callable[[], List[Any]],
    predicate: Optional[ChangePredicate] = None,
) -> StreamingResponse:
    """Stream ``fetch()`` results as SSE until the client disconnects"""

    async def event_generator():
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()

        def on_refresh(items: List[Any]) -> None:
            # Writers may publish from a worker thread
            loop.call_soon_threadsafe(queue.put_nowait, list(items))

        live = LiveQuery(change_feed, table, fetch, predicate, on_refresh=on_refresh)
        live.start()
        logger.info(f"Live stream opened on {table}")
        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    items = await asyncio.wait_for(
                        queue.get(), timeout=KEEPALIVE_SECONDS
                    )
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield to_sse({"table": table, "items": items})
        finally:
            live.stop()
            logger.info(f"Live stream closed on {table}")

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=SSE_HEADERS
    )


def _news_fetch(session_factory):
    def fetch():
        with session_factory() as db:
            return _dump(SiteContentService(SqlContentStore(db)).list_news())

    return fetch


def _events_fetch(session_factory):
    def fetch():
        with session_factory() as db:
            service = SiteContentService(SqlContentStore(db))
            return [event_payload(e) for e in service.list_upcoming_events()]

    return fetch


def _gallery_fetch(session_factory):
    def fetch():
        with session_factory() as db:
            return _dump(SiteContentService(SqlContentStore(db)).list_gallery())

    return fetch


LIVE_RESOURCES = {
    "news": (NewsItem, _news_fetch),
    "events": (Event, _events_fetch),
    "gallery": (GalleryImage, _gallery_fetch),
}


@router.get("/sections/{section_key}")
async def live_section(
    section_key: str,
    request: Request,
    session_factory=Depends(get_session_factory),
):
    """Stream a single page section, filtered to its key"""

    def fetch():
        with session_factory() as db:
            section = SiteContentService(SqlContentStore(db)).get_section(section_key)
            return [section.model_dump(mode="json")] if section else []

    return live_stream_response(
        request,
        table_name(SiteSection),
        fetch,
        column_equals("section_key", section_key),
    )


@router.get("/{resource}")
async def live_resource(
    resource: str,
    request: Request,
    session_factory=Depends(get_session_factory),
):
    """Stream the public news, events or gallery list"""
    if resource not in LIVE_RESOURCES:
        raise HTTPException(status_code=404, detail=f"Unknown live resource '{resource}'")

    model, fetch_factory = LIVE_RESOURCES[resource]
    return live_stream_response(request, table_name(model), fetch_factory(session_factory))
