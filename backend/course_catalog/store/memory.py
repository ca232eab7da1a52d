from __future__ import annotations

import asyncio
import copy
import itertools
from typing import Any

from course_catalog.schemas.course import CourseRecord
from course_catalog.store.base import parse_id
from course_catalog.store.predicates import ID_DESCENDING, Predicate, Sort, evaluate

# Fields a patch may never overwrite.
_WRITE_ONCE = frozenset({"id", "createdAt", "creatorUserId"})


class InMemoryCourseStore:
    """
    Process-local course store.

    Notes:
    - Records are plain dicts keyed by public (camelCase) field names.
    - One asyncio.Lock makes each call atomic, matching the per-document
      atomicity the PostgreSQL store gets from single UPDATE statements.
    - Ids come from a counter and are never reused.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._records: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def is_valid_id(self, raw: object) -> bool:
        return parse_id(raw) is not None

    def _snapshot(self, record: dict[str, Any] | None) -> CourseRecord | None:
        if record is None:
            return None
        return CourseRecord.model_validate(copy.deepcopy(record))

    def _get(self, course_id: object) -> dict[str, Any] | None:
        key = parse_id(course_id)
        if key is None:
            return None
        return self._records.get(key)

    async def insert(self, record: dict[str, Any]) -> int:
        async with self._lock:
            new_id = next(self._ids)
            stored = copy.deepcopy(record)
            stored["id"] = new_id
            stored.setdefault("likes", [])
            stored.setdefault("comments", [])
            self._records[new_id] = stored
            return new_id

    async def find_by_id(self, course_id: object) -> CourseRecord | None:
        async with self._lock:
            return self._snapshot(self._get(course_id))

    async def find_many(
        self,
        predicate: Predicate,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[CourseRecord]:
        async with self._lock:
            matches = [r for r in self._records.values() if evaluate(predicate, r)]
            sort = sort or ID_DESCENDING
            matches.sort(key=lambda r: r.get(sort.field), reverse=sort.descending)
            end = None if limit is None else skip + limit
            return [self._snapshot(r) for r in matches[skip:end]]

    async def count_matching(self, predicate: Predicate) -> int:
        async with self._lock:
            return sum(1 for r in self._records.values() if evaluate(predicate, r))

    async def update_by_id(self, course_id: object, patch: dict[str, Any]) -> CourseRecord | None:
        async with self._lock:
            record = self._get(course_id)
            if record is None:
                return None
            for field, value in patch.items():
                if field not in _WRITE_ONCE:
                    record[field] = copy.deepcopy(value)
            return self._snapshot(record)

    async def delete_by_id(self, course_id: object) -> bool:
        async with self._lock:
            key = parse_id(course_id)
            if key is None:
                return False
            return self._records.pop(key, None) is not None

    async def toggle_like(self, course_id: object, user_id: str) -> CourseRecord | None:
        async with self._lock:
            record = self._get(course_id)
            if record is None:
                return None
            likes = record["likes"]
            if user_id in likes:
                record["likes"] = [u for u in likes if u != user_id]
            else:
                likes.append(user_id)
            return self._snapshot(record)

    async def append_comment(self, course_id: object, text: str) -> CourseRecord | None:
        async with self._lock:
            record = self._get(course_id)
            if record is None:
                return None
            record["comments"].append(text)
            return self._snapshot(record)
