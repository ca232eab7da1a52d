"""Record store contract for course documents.

The catalog core only talks to this Protocol. Implementations:
``SqlCourseStore`` (PostgreSQL) and ``InMemoryCourseStore``.

Invariants every implementation keeps:
    - ids are assigned by the store, unique, and never reused after delete
    - ``toggle_like`` and ``append_comment`` are single atomic store operations
    - driver/transport faults surface as ``StoreUnavailable``
"""

from __future__ import annotations

from typing import Any, Protocol

from course_catalog.schemas.course import CourseRecord
from course_catalog.store.predicates import Predicate, Sort

# Identifiers are positive signed 64-bit integers (PostgreSQL BIGINT).
MAX_ID = 2**63 - 1


def parse_id(raw: object) -> int | None:
    """Return the integer id for a well-formed identifier, else None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text.isdigit() or not text.isascii():
            return None
        value = int(text)
    else:
        return None
    if value < 1 or value > MAX_ID:
        return None
    return value


class CourseStore(Protocol):
    def is_valid_id(self, raw: object) -> bool: ...

    async def insert(self, record: dict[str, Any]) -> int: ...

    async def find_by_id(self, course_id: object) -> CourseRecord | None: ...

    async def find_many(
        self,
        predicate: Predicate,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[CourseRecord]: ...

    async def count_matching(self, predicate: Predicate) -> int: ...

    async def update_by_id(self, course_id: object, patch: dict[str, Any]) -> CourseRecord | None: ...

    async def delete_by_id(self, course_id: object) -> bool: ...

    async def toggle_like(self, course_id: object, user_id: str) -> CourseRecord | None: ...

    async def append_comment(self, course_id: object, text: str) -> CourseRecord | None: ...
