"""Standard response envelope helpers."""
from typing import Any, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from listing_hub.schemas.base_schema import ApiResponse, Meta


def _trace_id(request: Optional[Request]) -> str:
    return getattr(request.state, "trace_id", "") if request else ""


def ok(
    data: Any,
    message: str,
    request: Optional[Request] = None,
    meta: Optional[Meta] = None,
) -> ApiResponse:
    """Wrap a successful response in the standard ApiResponse envelope."""
    return ApiResponse(
        success=True,
        data=data,
        meta=meta,
        message=message,
        errors=None,
        trace_id=_trace_id(request),
    )


def fail(
    status_code: int,
    message: str,
    request: Optional[Request] = None,
    errors: Optional[List[Any]] = None,
) -> JSONResponse:
    """Error envelope used by the exception handlers."""
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(
            success=False,
            data=None,
            message=message,
            errors=errors if errors is not None else [message],
            trace_id=_trace_id(request),
        ).model_dump(mode="json"),
    )
