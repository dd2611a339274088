# api.py
"""Glue between the HTTP routes and the data access layer."""
from __future__ import annotations

from typing import Any, Dict, List, Type

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from dal import Catalog
from outcomes import (
    Conflict,
    Created,
    Deleted,
    Duplicate,
    Failure,
    Invalid,
    NotFound,
    Ok,
    Outcome,
    StorageFailure,
    Updated,
)
from schemas import ErrorDetail, ErrorResponse, ErrorWrapper

STATUS_CODES: Dict[Type[Any], int] = {
    Ok: status.HTTP_200_OK,
    Created: status.HTTP_201_CREATED,
    Updated: status.HTTP_204_NO_CONTENT,
    Deleted: status.HTTP_204_NO_CONTENT,
    Invalid: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    Duplicate: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_catalog() -> Catalog:
    """FastAPI dependency; tests override it with a catalog on a scratch database."""
    return Catalog()


def error_body(failure: Failure) -> Dict[str, Any]:
    details = [ErrorDetail(**d) for d in failure.details] or None
    return ErrorWrapper(
        error=ErrorResponse(code=failure.code, message=failure.message, details=details)
    ).model_dump()


def render(outcome: Outcome) -> Response:
    """Turn an outcome into a response."""
    code = STATUS_CODES[type(outcome)]
    if isinstance(outcome, Failure):
        return JSONResponse(status_code=code, content=error_body(outcome))
    if code == status.HTTP_204_NO_CONTENT:
        return Response(status_code=code)
    return JSONResponse(status_code=code, content=jsonable_encoder(outcome.payload))


def render_list(items: List[Dict[str, Any]]) -> Response:
    return render(Ok(items))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Bodies that do not parse are reported like any other Invalid outcome."""
    details = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = ".".join(str(x) for x in loc[1:]) if len(loc) > 1 else str(loc[0] if loc else "")
        details.append({"field": field, "message": error.get("msg", "Invalid value")})
    return render(Invalid(message="Request validation failed", details=tuple(details)))
