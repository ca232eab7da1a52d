from __future__ import annotations

import argparse
import asyncio

from course_catalog.core.settings import get_settings
from course_catalog.db.session import dispose_engine, get_session_maker
from course_catalog.schemas.course import CourseCreate
from course_catalog.services.catalog import CatalogService
from course_catalog.store.sql import SqlCourseStore

SAMPLE_COURSES = [
    {"title": "Intro to Physics", "description": "Kinematics and dynamics", "price": 20, "tags": ["physics", "science"]},
    {"title": "Linear Algebra", "description": "Vectors, matrices, eigenvalues", "price": 35, "tags": ["math"]},
    {"title": "Python for Data Analysis", "description": "pandas and friends", "price": 0, "tags": ["python", "data"]},
    {"title": "Organic Chemistry I", "description": "Bonds and reactions", "price": 25, "tags": ["chemistry", "science"]},
    {"title": "Music Theory Basics", "description": "Scales, intervals, chords", "price": 15, "tags": ["music"]},
]


async def main() -> None:
    parser = argparse.ArgumentParser(description="Insert sample courses into the database.")
    parser.add_argument("--user-id", required=True, help="creatorUserId stamped on every course")
    parser.add_argument("--creator-name", default="Sample Creator")
    args = parser.parse_args()

    settings = get_settings()
    SessionLocal = get_session_maker()
    try:
        async with SessionLocal() as session:
            catalog = CatalogService(SqlCourseStore(session), page_size=settings.page_size)
            for sample in SAMPLE_COURSES:
                body = CourseCreate(**sample, creator_name=args.creator_name)
                course = await catalog.create_course(body, args.user_id)
                print(f"Created course: id={course.id} title={course.title}")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
