# jobjournal/core/errors.py
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class FieldValidationError(Exception):
    """A client error tied to one input field.

    Rendered as ``{code, reason, message, location}`` so the client can point
    at the offending field.
    """

    reason = "ValidationError"

    def __init__(self, message: str, location: str, code: int = 422):
        super().__init__(message)
        self.message = message
        self.location = location
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "reason": self.reason,
            "message": self.message,
            "location": self.location,
        }


def _location(loc) -> str:
    # drop the leading "body" / "query" / "path" marker when there is more
    parts = [str(p) for p in loc]
    if len(parts) > 1:
        parts = parts[1:]
    return ".".join(parts) or "body"


async def field_validation_handler(request: Request, exc: FieldValidationError):
    logger.warning("Rejected %s %s: %s (%s)", request.method, request.url.path, exc.message, exc.location)
    return JSONResponse(status_code=exc.code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {"loc": ("body",), "msg": "Invalid request"}
    err = FieldValidationError(first.get("msg", "Invalid request"), _location(first.get("loc", ())))
    return await field_validation_handler(request, err)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FieldValidationError, field_validation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
