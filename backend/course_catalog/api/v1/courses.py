from __future__ import annotations

from fastapi import APIRouter, Depends, status

from course_catalog.api.deps import get_catalog, get_current_user_id, get_optional_user_id
from course_catalog.core.errors import Unauthenticated
from course_catalog.schemas.course import (
    CommentRequest,
    CourseCreate,
    CourseList,
    CoursePage,
    CourseRecord,
    CourseUpdate,
    MessageResponse,
)
from course_catalog.services.catalog import CatalogService, split_tags

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=CoursePage)
async def list_courses(
    page: int = 1,
    catalog: CatalogService = Depends(get_catalog),
) -> CoursePage:
    result = await catalog.list_courses(page)
    return CoursePage(data=result.records, currentPage=result.page, numberOfPages=result.total_pages)


@router.get("/search", response_model=CourseList)
async def search_courses(
    searchQuery: str | None = None,
    tags: str | None = None,
    catalog: CatalogService = Depends(get_catalog),
) -> CourseList:
    courses = await catalog.search_courses(searchQuery, split_tags(tags))
    return CourseList(data=courses)


@router.get("/creator", response_model=CourseList)
async def courses_by_creator(
    name: str,
    catalog: CatalogService = Depends(get_catalog),
) -> CourseList:
    return CourseList(data=await catalog.courses_by_creator(name))


@router.get("/{course_id}", response_model=CourseRecord)
async def get_course(
    course_id: str,
    catalog: CatalogService = Depends(get_catalog),
) -> CourseRecord:
    return await catalog.get_course(course_id)


@router.post("", response_model=CourseRecord, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseCreate,
    catalog: CatalogService = Depends(get_catalog),
    user_id: str = Depends(get_current_user_id),
) -> CourseRecord:
    return await catalog.create_course(body, user_id)


@router.patch("/{course_id}", response_model=CourseRecord)
async def update_course(
    course_id: str,
    body: CourseUpdate,
    catalog: CatalogService = Depends(get_catalog),
    _user_id: str = Depends(get_current_user_id),
) -> CourseRecord:
    return await catalog.update_course(course_id, body)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    catalog: CatalogService = Depends(get_catalog),
    _user_id: str = Depends(get_current_user_id),
) -> MessageResponse:
    await catalog.delete_course(course_id)
    return MessageResponse(message="Course is deleted successfully.")


@router.patch("/{course_id}/likeCourse", response_model=CourseRecord | MessageResponse)
async def like_course(
    course_id: str,
    catalog: CatalogService = Depends(get_catalog),
    user_id: str | None = Depends(get_optional_user_id),
) -> CourseRecord | MessageResponse:
    try:
        return await catalog.toggle_like(course_id, user_id)
    except Unauthenticated as e:
        # Clients key off this payload shape, not a status code.
        return MessageResponse(message=e.message)


@router.post("/{course_id}/commentCourse", response_model=CourseRecord)
async def comment_course(
    body: CommentRequest,
    course_id: str,
    catalog: CatalogService = Depends(get_catalog),
    _user_id: str = Depends(get_current_user_id),
) -> CourseRecord:
    return await catalog.add_comment(course_id, body.value)
