"""
Exception handlers for the API.

Every error leaves the service as a JSON object with a ``message`` field.
Validation failures become 400s instead of FastAPI's default 422, and
datastore failures are logged and reported without internal detail.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _field_name(error: dict) -> str:
    # loc looks like ("body", "fat") or ("path", "id"); drop the source
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    return ".".join(loc) or "request body"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = sorted({_field_name(error) for error in errors})
        logger.debug(f"Rejected {request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": f"Missing or invalid field: {', '.join(fields)}"},
        )

    @app.exception_handler(SQLAlchemyError)
    async def datastore_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Datastore error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )
