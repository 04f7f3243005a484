"""Domain errors and their JSON renderings."""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ValidationFailed(Exception):
    """Raised by services when a request breaks a field or business rule."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        first = next(iter(errors.values()), [])
        self.message = first[0] if first else "The given data was invalid."
        super().__init__(self.message)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]})


def _error_body(message: str, errors: dict[str, list[str]]) -> dict:
    return {"message": message, "errors": errors}


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(_error_body(exc.message, exc.errors), status_code=422)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI's validation errors in the same field -> messages shape."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        # JSON decode errors carry a character offset, not a field name
        field = loc[0] if loc and isinstance(loc[0], str) else "body"
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))
    message = next(iter(errors.values()))[0] if errors else "The given data was invalid."
    return JSONResponse(_error_body(message, errors), status_code=422)
