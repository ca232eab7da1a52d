from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import Text, any_, case, delete, false, func, insert, literal, or_, select, true, update
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from course_catalog.core.errors import StoreUnavailable
from course_catalog.db.models.course import Course
from course_catalog.schemas.course import CourseRecord
from course_catalog.store.base import parse_id
from course_catalog.store.predicates import (
    ID_DESCENDING,
    AnyIn,
    AnyOf,
    Contains,
    FieldEquals,
    MatchAll,
    Predicate,
    Sort,
)

logger = logging.getLogger(__name__)

# Public record field -> mapped column.
COLUMNS = {
    "id": Course.id,
    "title": Course.title,
    "description": Course.description,
    "price": Course.price,
    "creatorName": Course.creator_name,
    "creatorUserId": Course.creator_user_id,
    "tags": Course.tags,
    "selectedFileRef": Course.selected_file_ref,
    "likes": Course.likes,
    "comments": Course.comments,
    "createdAt": Course.created_at,
}

_WRITABLE = ("title", "description", "price", "creatorName", "tags", "selectedFileRef")
_INSERTABLE = _WRITABLE + ("creatorUserId", "createdAt", "likes", "comments")


def _column(field: str):
    try:
        return COLUMNS[field]
    except KeyError:
        raise ValueError(f"Unknown course field: {field!r}") from None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def to_clause(predicate: Predicate) -> ColumnElement[bool]:
    """Compile a store predicate into a SQLAlchemy boolean clause."""
    if isinstance(predicate, MatchAll):
        return true()
    if isinstance(predicate, FieldEquals):
        return _column(predicate.field) == predicate.value
    if isinstance(predicate, Contains):
        pattern = f"%{_escape_like(predicate.text)}%"
        return _column(predicate.field).ilike(pattern, escape="\\")
    if isinstance(predicate, AnyIn):
        if not predicate.values:
            return false()
        return _column(predicate.field).overlap(list(predicate.values))
    if isinstance(predicate, AnyOf):
        if not predicate.predicates:
            return false()
        return or_(*(to_clause(p) for p in predicate.predicates))
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _columns_for(record: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    return {_column(k).key: v for k, v in record.items() if k in allowed}


class SqlCourseStore:
    """PostgreSQL-backed course store over a request-scoped AsyncSession."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    def is_valid_id(self, raw: object) -> bool:
        return parse_id(raw) is not None

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except (OperationalError, InterfaceError, OSError) as e:
            await self._safe_rollback()
            logger.error("store %s failed: %s", operation, e)
            raise StoreUnavailable(operation, type(e).__name__) from e
        except DBAPIError as e:
            await self._safe_rollback()
            if e.connection_invalidated:
                raise StoreUnavailable(operation, type(e).__name__) from e
            raise

    async def _safe_rollback(self) -> None:
        try:
            await self._db.rollback()
        except (DBAPIError, OSError):
            logger.warning("rollback after store failure also failed", exc_info=True)

    async def insert(self, record: dict[str, Any]) -> int:
        values = _columns_for(record, _INSERTABLE)
        async with self._guard("insert"):
            res = await self._db.execute(insert(Course).values(**values).returning(Course.id))
            new_id = res.scalar_one()
            await self._db.commit()
        return int(new_id)

    async def find_by_id(self, course_id: object) -> CourseRecord | None:
        key = parse_id(course_id)
        if key is None:
            return None
        async with self._guard("find_by_id"):
            res = await self._db.execute(select(Course).where(Course.id == key))
            course = res.scalar_one_or_none()
        return None if course is None else CourseRecord.model_validate(course)

    async def find_many(
        self,
        predicate: Predicate,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[CourseRecord]:
        sort = sort or ID_DESCENDING
        column = _column(sort.field)
        stmt = (
            select(Course)
            .where(to_clause(predicate))
            .order_by(column.desc() if sort.descending else column.asc())
            .offset(skip)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._guard("find_many"):
            res = await self._db.execute(stmt)
            rows = list(res.scalars().all())
        return [CourseRecord.model_validate(c) for c in rows]

    async def count_matching(self, predicate: Predicate) -> int:
        stmt = select(func.count()).select_from(Course).where(to_clause(predicate))
        async with self._guard("count_matching"):
            res = await self._db.execute(stmt)
            return int(res.scalar_one())

    async def _update_returning(self, operation: str, key: int, values: dict[str, Any]) -> CourseRecord | None:
        stmt = (
            update(Course)
            .where(Course.id == key)
            .values(**values)
            .returning(Course)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._guard(operation):
            res = await self._db.execute(stmt)
            course = res.scalar_one_or_none()
            await self._db.commit()
        return None if course is None else CourseRecord.model_validate(course)

    async def update_by_id(self, course_id: object, patch: dict[str, Any]) -> CourseRecord | None:
        key = parse_id(course_id)
        if key is None:
            return None
        values = _columns_for(patch, _WRITABLE)
        if not values:
            return await self.find_by_id(key)
        return await self._update_returning("update_by_id", key, values)

    async def delete_by_id(self, course_id: object) -> bool:
        key = parse_id(course_id)
        if key is None:
            return False
        async with self._guard("delete_by_id"):
            res = await self._db.execute(delete(Course).where(Course.id == key))
            await self._db.commit()
        return bool(res.rowcount)

    async def toggle_like(self, course_id: object, user_id: str) -> CourseRecord | None:
        key = parse_id(course_id)
        if key is None:
            return None
        # One statement: membership test and set/remove happen under the row lock.
        # array_remove drops every occurrence, restoring set semantics.
        already_liked = literal(user_id, Text) == any_(Course.likes)
        likes = case(
            (already_liked, func.array_remove(Course.likes, user_id, type_=ARRAY(Text))),
            else_=func.array_append(Course.likes, user_id, type_=ARRAY(Text)),
        )
        return await self._update_returning("toggle_like", key, {"likes": likes})

    async def append_comment(self, course_id: object, text: str) -> CourseRecord | None:
        key = parse_id(course_id)
        if key is None:
            return None
        comments = func.array_append(Course.comments, text, type_=ARRAY(Text))
        return await self._update_returning("append_comment", key, {"comments": comments})
