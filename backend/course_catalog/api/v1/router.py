from __future__ import annotations

from fastapi import APIRouter

from course_catalog.api.v1 import courses

api_router = APIRouter()
api_router.include_router(courses.router)
