"""Dashboard editors for sections, news, events and gallery.

Each editor lists the table and accepts a batch of rows: rows without an id
are created, rows with an id are updated.
"""

import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from school_portal.auth.dependencies import require_admin_session
from school_portal.services.content_store import SqlContentStore
from school_portal.services.editor_service import (
    GalleryEditor,
    NewsEditor,
    SectionEditor,
    TableEditor,
)
from school_portal.services.event_service import EventEditor
from school_portal.services.site_content_service import event_payload
from school_portal.services.store_service import get_content_store

router = APIRouter(
    prefix="/admin/api",
    tags=["Admin content"],
    dependencies=[Depends(require_admin_session)],
)


class SectionRow(BaseModel):
    id: uuid.UUID
    title: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    is_visible: Optional[bool] = None


class NewsRow(BaseModel):
    id: Optional[uuid.UUID] = None
    title: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    published_date: Optional[date] = None
    is_published: Optional[bool] = None


class EventRow(BaseModel):
    id: Optional[uuid.UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    event_date: Optional[datetime] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    invited_courses: Optional[str] = None
    specialties: Optional[str] = None
    max_participants: Optional[int] = Field(default=None, ge=0)
    current_participants: Optional[int] = Field(default=None, ge=0)


class GalleryRow(BaseModel):
    id: Optional[uuid.UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    order_index: Optional[int] = None
    is_visible: Optional[bool] = None


class MoveRequest(BaseModel):
    direction: Literal["up", "down"]


def _save(editor: TableEditor, rows: List[BaseModel]) -> dict:
    result = editor.save_rows(row.model_dump(exclude_unset=True) for row in rows)
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result)
    return result


def _delete(editor: TableEditor, row_id: uuid.UUID) -> dict:
    result = editor.delete_row(row_id)
    if not result["success"]:
        status_code = 404 if result["error"] == "Row not found" else 502
        raise HTTPException(status_code=status_code, detail=result["error"])
    return result


# Sections
@router.get("/sections")
async def list_sections(store: SqlContentStore = Depends(get_content_store)):
    return SectionEditor(store).list_rows()


@router.put("/sections")
async def save_sections(
    rows: List[SectionRow], store: SqlContentStore = Depends(get_content_store)
):
    return _save(SectionEditor(store), rows)


# News
@router.get("/news")
async def list_news(store: SqlContentStore = Depends(get_content_store)):
    return NewsEditor(store).list_rows()


@router.put("/news")
async def save_news(
    rows: List[NewsRow], store: SqlContentStore = Depends(get_content_store)
):
    return _save(NewsEditor(store), rows)


@router.delete("/news/{news_id}")
async def delete_news(
    news_id: uuid.UUID, store: SqlContentStore = Depends(get_content_store)
):
    return _delete(NewsEditor(store), news_id)


# Events
@router.get("/events")
async def list_events(store: SqlContentStore = Depends(get_content_store)):
    return [event_payload(event) for event in EventEditor(store).list_rows()]


@router.put("/events")
async def save_events(
    rows: List[EventRow], store: SqlContentStore = Depends(get_content_store)
):
    return _save(EventEditor(store), rows)


@router.delete("/events/{event_id}")
async def delete_event(
    event_id: uuid.UUID, store: SqlContentStore = Depends(get_content_store)
):
    """Delete an event; its registrations go with it"""
    return _delete(EventEditor(store), event_id)


# Gallery
@router.get("/gallery")
async def list_gallery(store: SqlContentStore = Depends(get_content_store)):
    return GalleryEditor(store).list_rows()


@router.put("/gallery")
async def save_gallery(
    rows: List[GalleryRow], store: SqlContentStore = Depends(get_content_store)
):
    return _save(GalleryEditor(store), rows)


@router.delete("/gallery/{image_id}")
async def delete_gallery_image(
    image_id: uuid.UUID, store: SqlContentStore = Depends(get_content_store)
):
    return _delete(GalleryEditor(store), image_id)


@router.post("/gallery/{image_id}/move")
async def move_gallery_image(
    image_id: uuid.UUID,
    move: MoveRequest,
    store: SqlContentStore = Depends(get_content_store),
):
    result = GalleryEditor(store).move_image(image_id, move.direction)
    if not result["success"]:
        status_code = 404 if result["error"] == "Image not found" else 400
        raise HTTPException(status_code=status_code, detail=result["error"])
    return result
