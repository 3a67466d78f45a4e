"""Content store: the single shared data service behind every screen.

Stores must be swappable; services depend on the ContentStore interface only.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

from sqlalchemy import delete as sa_delete
from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from school_portal.errors import ContentStoreError
from school_portal.services.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    change_feed,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)
RowId = Union[uuid.UUID, str]


def as_uuid(value: RowId) -> uuid.UUID:
    """Normalize a row id; raises ValueError for malformed strings"""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def table_name(model: Type[SQLModel]) -> str:
    return model.__tablename__


class ContentStore(ABC):
    """Interface for content persistence operations."""

    feed: ChangeFeed

    @abstractmethod
    def select(
        self,
        model: Type[ModelT],
        *where,
        order_by=None,
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        """Return rows matching all filters, optionally ordered and limited."""
        ...

    @abstractmethod
    def get(self, model: Type[ModelT], row_id: RowId) -> Optional[ModelT]:
        """Return a row by id, or None if not found."""
        ...

    @abstractmethod
    def insert(self, model: Type[ModelT], row: Dict[str, Any]) -> ModelT:
        """Insert one row and return it."""
        ...

    @abstractmethod
    def update(
        self, model: Type[ModelT], row_id: RowId, patch: Dict[str, Any]
    ) -> Optional[ModelT]:
        """Apply a patch to one row; None if the row does not exist."""
        ...

    @abstractmethod
    def delete(self, model: Type[SQLModel], ids: Union[RowId, Iterable[RowId]]) -> int:
        """Delete rows by identity; returns the number of rows deleted."""
        ...

    @abstractmethod
    def increment(self, model: Type[SQLModel], row_id: RowId, column: str) -> bool:
        """Atomically add one to a counter column; False if no row matched."""
        ...

    def subscribe(self, model: Type[SQLModel], callback, predicate=None):
        """Subscribe to committed changes on a table."""
        return self.feed.subscribe(table_name(model), callback, predicate)


def _cascade_children(parent_table: str) -> List[str]:
    """Tables whose rows are removed by ON DELETE CASCADE from parent_table"""
    children = []
    for table in SQLModel.metadata.tables.values():
        for fk in table.foreign_keys:
            if (
                fk.column.table.name == parent_table
                and (fk.ondelete or "").upper() == "CASCADE"
            ):
                children.append(table.name)
    return children


class SqlContentStore(ContentStore):
    """Relational content store using SQLModel sessions."""

    def __init__(self, db_session: Session, feed: Optional[ChangeFeed] = None):
        self.db = db_session
        self.feed = feed or change_feed

    def _publish(
        self,
        model: Type[SQLModel],
        change_type: ChangeType,
        ids: List[uuid.UUID],
        record: Optional[SQLModel] = None,
    ) -> None:
        payload = record.model_dump(mode="json") if record is not None else {}
        self.feed.publish(
            ChangeEvent(
                table=table_name(model),
                type=change_type,
                ids=[str(i) for i in ids],
                record=payload,
            )
        )

    def select(self, model, *where, order_by=None, limit=None):
        stmt = select(model)
        if where:
            stmt = stmt.where(*where)
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return list(self.db.exec(stmt).all())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error selecting from {table_name(model)}: {e}")
            raise ContentStoreError("select", table_name(model), e) from e

    def get(self, model, row_id):
        try:
            return self.db.get(model, as_uuid(row_id))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error reading {table_name(model)} {row_id}: {e}")
            raise ContentStoreError("get", table_name(model), e) from e

    def insert(self, model, row):
        instance = model.model_validate(row)
        try:
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error inserting into {table_name(model)}: {e}")
            raise ContentStoreError("insert", table_name(model), e) from e

        logger.info(f"Inserted {table_name(model)} row {instance.id}")
        self._publish(model, ChangeType.INSERT, [instance.id], instance)
        return instance

    def update(self, model, row_id, patch):
        try:
            instance = self.db.get(model, as_uuid(row_id))
            if instance is None:
                return None

            for key, value in patch.items():
                setattr(instance, key, value)
            if "updated_at" in model.model_fields and "updated_at" not in patch:
                instance.updated_at = datetime.now(timezone.utc)

            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating {table_name(model)} {row_id}: {e}")
            raise ContentStoreError("update", table_name(model), e) from e

        self._publish(model, ChangeType.UPDATE, [instance.id], instance)
        return instance

    def delete(self, model, ids):
        if isinstance(ids, (uuid.UUID, str)):
            ids = [ids]
        id_list = [as_uuid(i) for i in ids]
        if not id_list:
            return 0

        try:
            result = self.db.execute(
                sa_delete(model)
                .where(model.id.in_(id_list))
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting from {table_name(model)}: {e}")
            raise ContentStoreError("delete", table_name(model), e) from e

        # Rows removed by the database cascade are not tracked by the session
        self.db.expire_all()

        deleted = result.rowcount or 0
        if deleted:
            self._publish(model, ChangeType.DELETE, id_list)
            for child in _cascade_children(table_name(model)):
                self.feed.publish(
                    ChangeEvent(
                        table=child,
                        type=ChangeType.DELETE,
                        ids=[],
                        record={},
                    )
                )
        return deleted

    def increment(self, model, row_id, column):
        target = getattr(model, column)
        key = as_uuid(row_id)
        try:
            result = self.db.execute(
                sa_update(model)
                .where(model.id == key)
                .values({column: target + 1})
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error incrementing {table_name(model)}.{column}: {e}")
            raise ContentStoreError("increment", table_name(model), e) from e

        self.db.expire_all()
        if not result.rowcount:
            return False

        self._publish(model, ChangeType.UPDATE, [key], self.db.get(model, key))
        return True
