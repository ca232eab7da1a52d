from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from course_catalog.core.security import bearer_token, user_id_from_token
from course_catalog.core.settings import Settings, get_settings
from course_catalog.db.session import get_session_maker
from course_catalog.services.catalog import CatalogService
from course_catalog.store.base import CourseStore
from course_catalog.store.memory import InMemoryCourseStore
from course_catalog.store.sql import SqlCourseStore


@lru_cache(maxsize=1)
def get_memory_store() -> InMemoryCourseStore:
    return InMemoryCourseStore()


async def get_store(settings: Settings = Depends(get_settings)) -> AsyncGenerator[CourseStore, None]:
    if settings.store_backend == "memory":
        yield get_memory_store()
        return

    SessionLocal = get_session_maker()
    async with SessionLocal() as session:
        yield SqlCourseStore(session)


def get_catalog(
    store: CourseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CatalogService:
    return CatalogService(store, page_size=settings.page_size)


def get_optional_user_id(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> str | None:
    # Bearer header wins over the cookie; a bad token counts as no identity.
    token = bearer_token(request.headers.get("Authorization")) or request.cookies.get(
        settings.access_cookie_name
    )
    return user_id_from_token(token, settings.jwt_secret)


def get_current_user_id(user_id: str | None = Depends(get_optional_user_id)) -> str:
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user_id
