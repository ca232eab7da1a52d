from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from course_catalog.api.deps import get_store
from course_catalog.api.error_handlers import register_error_handlers
from course_catalog.api.v1.router import api_router
from course_catalog.core.logging import setup_logging
from course_catalog.core.settings import get_settings
from course_catalog.db.session import dispose_engine
from course_catalog.store.base import CourseStore
from course_catalog.store.predicates import MatchAll

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("course catalog starting (store=%s)", settings.store_backend)
    yield
    if settings.store_backend == "postgres":
        await dispose_engine()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="Course Catalog API", lifespan=lifespan)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.get("/health/store")
    async def health_store(store: CourseStore = Depends(get_store)):
        return {"ok": True, "courses": await store.count_matching(MatchAll())}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("course_catalog.main:app", host="0.0.0.0", port=get_settings().port)
