"""Uniform JSON envelopes and the mapping from error kinds to status codes.

Success: ``{"success": true, "statusCode", "message", "data"}``
Failure: ``{"success": false, "statusCode", "message", "errors": [...]}``
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from starlette.responses import JSONResponse

from src.userauth.core.result import Err, ErrorKind, Result, ServiceError

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class ApiError(Exception):
    """Raised from FastAPI dependencies to short-circuit with an error envelope."""

    def __init__(self, error: ServiceError):
        self.error = error
        super().__init__(error.message)


def success_response(
    data: Any = None, message: str = "Success", status_code: int = 200
) -> JSONResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "success": True,
                "statusCode": status_code,
                "message": message,
                "data": data,
            }
        ),
    )


def error_response(
    status_code: int, message: str, errors: list[dict[str, Any]] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            {
                "success": False,
                "statusCode": status_code,
                "message": message,
                "errors": errors or [],
            }
        ),
    )


def service_error_response(error: ServiceError) -> JSONResponse:
    return error_response(STATUS_BY_KIND[error.kind], error.message, error.errors)


def respond(
    result: Result, message: str = "Success", status_code: int = 200
) -> JSONResponse:
    """Turn a service result into an envelope response."""
    if isinstance(result, Err):
        return service_error_response(result.error)
    return success_response(result.value, message, status_code)
