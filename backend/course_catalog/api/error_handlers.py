from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from course_catalog.core.errors import CatalogError, StoreUnavailable

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        if isinstance(exc, StoreUnavailable):
            logger.error(
                exc.message,
                extra={"error_code": exc.code, "path": request.url.path},
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        else:
            logger.info(exc.message, extra={"error_code": exc.code, "path": request.url.path})
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
