"""Dashboard editors: list, batch save and delete rows of one table.

A batch save issues one independent write per row. The first failure stops
the batch; rows written before it stay written.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

from pydantic import ValidationError
from sqlmodel import SQLModel

from school_portal.errors import ContentStoreError
from school_portal.models.gallery_image import GalleryImage
from school_portal.models.news import NewsItem
from school_portal.models.site_section import SiteSection
from school_portal.services.content_store import ContentStore

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Error al guardar los cambios"


class TableEditor:
    """Generic create/update/delete editor over one content table"""

    model: Type[SQLModel]
    fields: Tuple[str, ...] = ()
    insert_only_fields: Tuple[str, ...] = ()
    allow_insert = True
    allow_delete = True

    def __init__(self, store: ContentStore):
        self.store = store

    def order_by(self):
        return None

    def list_rows(self) -> List[SQLModel]:
        try:
            return self.store.select(self.model, order_by=self.order_by())
        except ContentStoreError as e:
            logger.error(f"Error loading {self.model.__tablename__}: {e}")
            return []

    def prepare(self, data: Dict[str, Any], is_new: bool) -> Dict[str, Any]:
        """Hook for per-table validation and normalization"""
        return data

    def _row_data(self, row: Dict[str, Any], is_new: bool) -> Dict[str, Any]:
        allowed = self.fields + (self.insert_only_fields if is_new else ())
        data = {key: row[key] for key in allowed if key in row}
        return self.prepare(data, is_new)

    def save_rows(self, rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
        saved = 0
        for row in rows:
            row_id = row.get("id")
            is_new = row_id is None
            try:
                data = self._row_data(row, is_new)
                if is_new:
                    if not self.allow_insert:
                        raise ValueError("New rows are not allowed")
                    self.store.insert(self.model, data)
                elif self.store.update(self.model, row_id, data) is None:
                    raise ValueError(f"Row {row_id} not found")
            except (ContentStoreError, ValidationError, ValueError) as e:
                logger.error(f"Error saving {self.model.__tablename__}: {e}")
                return {
                    "success": False,
                    "saved": saved,
                    "error": f"{SAVE_ERROR_MESSAGE}: {e}",
                }
            saved += 1

        logger.info(f"Saved {saved} {self.model.__tablename__} row(s)")
        return {
            "success": True,
            "saved": saved,
            "message": "Cambios guardados exitosamente",
        }

    def delete_row(self, row_id) -> Dict[str, Any]:
        if not self.allow_delete:
            return {"success": False, "error": "Rows cannot be deleted"}
        try:
            deleted = self.store.delete(self.model, row_id)
        except ContentStoreError as e:
            logger.error(f"Error deleting {self.model.__tablename__} {row_id}: {e}")
            return {"success": False, "error": str(e)}

        if not deleted:
            return {"success": False, "error": "Row not found"}
        return {"success": True, "message": "Deleted successfully"}


class SectionEditor(TableEditor):
    """Sections are pre-seeded: only text, image and visibility change"""

    model = SiteSection
    fields = ("title", "content", "image_url", "is_visible")
    allow_insert = False
    allow_delete = False

    def order_by(self):
        return SiteSection.order_index


class NewsEditor(TableEditor):
    model = NewsItem
    fields = ("title", "content", "image_url", "published_date", "is_published")

    def order_by(self):
        return NewsItem.published_date.desc()


class GalleryEditor(TableEditor):
    model = GalleryImage
    fields = ("title", "description", "image_url", "order_index", "is_visible")

    def order_by(self):
        return GalleryImage.order_index

    def move_image(self, image_id, direction: str) -> Dict[str, Any]:
        """Swap an image with its neighbour and renumber order_index 0..n-1"""
        if direction not in ("up", "down"):
            return {"success": False, "error": "direction must be 'up' or 'down'"}

        images = self.list_rows()
        index: Optional[int] = next(
            (i for i, img in enumerate(images) if str(img.id) == str(image_id)),
            None,
        )
        if index is None:
            return {"success": False, "error": "Image not found"}

        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(images):
            return {"success": True, "saved": 0, "message": "Nothing to move"}

        images[index], images[target] = images[target], images[index]
        return self.save_rows(
            {"id": img.id, "order_index": position}
            for position, img in enumerate(images)
            if img.order_index != position
        )
