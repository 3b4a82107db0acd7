# hostelkit/api/errors.py
"""
Exception handlers turning application errors into JSON responses.
"""
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from hostelkit.core.exceptions import BaseAppException, DatabaseError
from hostelkit.core.logging import get_logger

logger = get_logger(__name__)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.error_code.value} - {exc.message}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
        },
    )
    content = exc.to_dict()
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=exc.status_code, content=content)


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Unhandled database error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    error = DatabaseError("A storage error occurred; retry the request")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
