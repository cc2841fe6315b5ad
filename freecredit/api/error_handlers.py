"""Error Handlers — map service and request errors to the FreeCredit JSON envelope.

Invariants:
    - FreeCreditError → its own status + to_response() envelope
    - RequestValidationError → 400 VALIDATION_ERROR; a rejected reaction type
      lists the accepted values, like core parse_reaction_type does
    - Exception (catch-all) → 500 INTERNAL_ERROR, never leaks internal details
    - Every log line carries the caller (X-User-Id) and, for 4xx, is a warning only

Design Decisions:
    - Same VALIDATION_ERROR code for pydantic and core validation: callers see one
      "invalid input" shape whether the body or the service rejected it
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from freecredit.core.enforce_reaction_input import VALID_REACTION_TYPES
from freecredit.core.errors import FreeCreditError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FreeCreditError, _freecredit_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


def _request_extra(request: Request, **fields) -> dict:
    """Log extras shared by every handler."""
    extra = {"path": request.url.path, "user_id": request.headers.get("x-user-id")}
    extra.update({k: v for k, v in fields.items() if v is not None})
    return {k: v for k, v in extra.items() if v is not None}


async def _freecredit_error_handler(request: Request, exc: FreeCreditError):
    extra = _request_extra(
        request,
        error_code=exc.code,
        campaign_id=exc.context.campaign_id,
        user_id=exc.context.user_id,
    )
    if exc.http_status >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", extra=extra)
    else:
        logger.warning(f"{type(exc).__name__}: {exc.message}", extra=extra)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    details = [_describe(e) for e in errors]
    rejected_type = next(
        (e.get("input") for e in errors if e["loc"] and e["loc"][-1] == "type"), None,
    )
    logger.warning(
        f"Rejected request on {request.url.path}: {[d['field'] for d in details]}",
        extra=_request_extra(
            request, error_code="VALIDATION_ERROR", reaction_type=rejected_type,
        ),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra=_request_extra(request, error_code="INTERNAL_ERROR"),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def _describe(error: dict) -> dict:
    """One field-level entry; reaction type errors name the accepted values."""
    loc = [str(part) for part in error["loc"] if part != "body"]
    field = ".".join(loc)
    message = error["msg"]
    if loc and loc[-1] == "type":
        message = f"Invalid reaction type. Expected one of: {', '.join(VALID_REACTION_TYPES)}"
    return {"field": field, "message": message, "type": error["type"]}
