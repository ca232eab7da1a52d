"""Catalog operations over a course record store.

Each call validates its input, issues one or more store calls and returns
a record (or raises a typed ``CatalogError``). Nothing is cached between
calls; ``StoreUnavailable`` from the store propagates untouched.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from course_catalog.core.errors import InvalidId, NotFound, Unauthenticated, ValidationError
from course_catalog.schemas.course import NUL, CourseCreate, CourseRecord, CourseUpdate
from course_catalog.store.base import CourseStore
from course_catalog.store.predicates import (
    ID_DESCENDING,
    AnyIn,
    Contains,
    FieldEquals,
    MatchAll,
    Predicate,
    any_of,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 4
TAG_DELIMITER = ","


@dataclass(frozen=True)
class CoursePageResult:
    records: list[CourseRecord]
    page: int
    total_pages: int


def split_tags(raw: str | None) -> list[str]:
    """Split a delimited tag filter (``"a,b"``) into labels, dropping blanks."""
    if not raw:
        return []
    return [t.strip() for t in raw.split(TAG_DELIMITER) if t.strip()]


def search_predicate(query: str | None, tags: Iterable[str] | None) -> Predicate:
    """
    Title substring OR tag membership.

    - an absent query is the empty query, which matches every title
    - no tags drops the tag branch
    """
    branches: list[Predicate] = [Contains("title", query or "")]
    tag_values = tuple(tags or ())
    if tag_values:
        branches.append(AnyIn("tags", tag_values))
    return any_of(*branches)


def _reject_nul(field: str, values: Iterable[str | None]) -> None:
    # PostgreSQL text columns cannot hold U+0000.
    if any(v is not None and NUL in v for v in values):
        raise ValidationError(f"{field} may not contain NUL characters")


class CatalogService:
    def __init__(self, store: CourseStore, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self.store = store
        self.page_size = page_size

    def _check_id(self, course_id: object) -> None:
        if not self.store.is_valid_id(course_id):
            logger.warning("rejected malformed course id %r", course_id)
            raise InvalidId(course_id)

    async def list_courses(self, page: int) -> CoursePageResult:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            logger.warning("rejected page %r", page)
            raise ValidationError(f"page must be a positive integer, got {page!r}")

        start_index = (page - 1) * self.page_size
        total = await self.store.count_matching(MatchAll())
        records: list[CourseRecord] = []
        if start_index < total:
            records = await self.store.find_many(
                MatchAll(), sort=ID_DESCENDING, skip=start_index, limit=self.page_size
            )
        return CoursePageResult(
            records=records,
            page=page,
            total_pages=math.ceil(total / self.page_size),
        )

    async def search_courses(self, query: str | None, tags: Iterable[str] | None) -> list[CourseRecord]:
        tags = list(tags or ())
        _reject_nul("searchQuery", [query])
        _reject_nul("tags", tags)
        return await self.store.find_many(search_predicate(query, tags), sort=ID_DESCENDING)

    async def courses_by_creator(self, name: str) -> list[CourseRecord]:
        _reject_nul("name", [name])
        return await self.store.find_many(FieldEquals("creatorName", name), sort=ID_DESCENDING)

    async def get_course(self, course_id: object) -> CourseRecord:
        self._check_id(course_id)
        course = await self.store.find_by_id(course_id)
        if course is None:
            raise NotFound(course_id)
        return course

    async def create_course(self, body: CourseCreate, caller_user_id: str | None) -> CourseRecord:
        if not caller_user_id:
            raise ValidationError("creatorUserId is required to create a course")

        record = body.model_dump(by_alias=True)
        # Server-owned fields; body values for these never reach the store.
        record.update(
            creatorUserId=str(caller_user_id),
            createdAt=datetime.now(timezone.utc),
            likes=[],
            comments=[],
        )
        new_id = await self.store.insert(record)
        created = await self.store.find_by_id(new_id)
        if created is None:
            raise NotFound(new_id)
        logger.info("course created", extra={"course_id": new_id, "user_id": caller_user_id})
        return created

    async def update_course(self, course_id: object, body: CourseUpdate) -> CourseRecord:
        self._check_id(course_id)
        updated = await self.store.update_by_id(course_id, body.model_dump(by_alias=True))
        if updated is None:
            raise NotFound(course_id)
        logger.info("course updated", extra={"course_id": updated.id})
        return updated

    async def delete_course(self, course_id: object) -> None:
        self._check_id(course_id)
        if not await self.store.delete_by_id(course_id):
            raise NotFound(course_id)
        logger.info("course deleted", extra={"course_id": course_id})

    async def toggle_like(self, course_id: object, caller_user_id: str | None) -> CourseRecord:
        if not caller_user_id:
            raise Unauthenticated()
        self._check_id(course_id)
        updated = await self.store.toggle_like(course_id, str(caller_user_id))
        if updated is None:
            raise NotFound(course_id)
        logger.info("course like toggled", extra={"course_id": updated.id, "user_id": caller_user_id})
        return updated

    async def add_comment(self, course_id: object, text: str) -> CourseRecord:
        self._check_id(course_id)
        _reject_nul("value", [text])
        updated = await self.store.append_comment(course_id, text)
        if updated is None:
            raise NotFound(course_id)
        logger.info("comment added", extra={"course_id": updated.id})
        return updated
