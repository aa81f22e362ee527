"""
Exception handlers that render every error as `{"error", "details", "code"}`.

`error` is a human-readable message; `details` (optional) is a plain string;
`code` is a stable machine-readable identifier.
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _title_from_status(status_code: int) -> str:
    mapping = {
        400: "Bad Request",
        404: "Not Found",
        405: "Method Not Allowed",
        429: "Too Many Requests",
        500: "Internal Server Error",
        503: "Service Unavailable",
    }
    return mapping.get(status_code, "Error")


def _details_text(details: Any) -> Optional[str]:
    if details is None or details == {} or details == []:
        return None
    if isinstance(details, str):
        return details
    if isinstance(details, dict) and set(details) == {"reason"}:
        return str(details["reason"])
    return json.dumps(jsonable_encoder(details))


def _error_body(
    *, status: int, message: Optional[str], details: Any = None, code: Optional[str] = None
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message or _title_from_status(status)}
    details_text = _details_text(details)
    if details_text:
        body["details"] = details_text
    if code:
        body["code"] = code
    return body


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("error") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        return detail_text, code, detail.get("details")
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _validation_summary(errors: Any) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid")
        parts.append(f"{loc}: {msg}" if loc else str(msg))
    return "; ".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        message, code, details = _parse_detail(exc.detail)
        return JSONResponse(
            _error_body(status=exc.status_code, message=message, details=details, code=code),
            status_code=exc.status_code,
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message, code, details = _parse_detail(exc.detail)
        return JSONResponse(
            _error_body(status=exc.status_code, message=message, details=details, code=code),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        return await http_exception_handler(request, http_exc)

    # Malformed bodies are client errors, reported as 400 rather than FastAPI's 422
    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            _error_body(
                status=400,
                message="Invalid request",
                details=_validation_summary(exc.errors()),
                code="validation_error",
            ),
            status_code=400,
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            _error_body(
                status=400,
                message="Invalid request",
                details=_validation_summary(exc.errors()),
                code="validation_error",
            ),
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            _error_body(status=500, message="Internal Server Error", code="internal_server_error"),
            status_code=500,
        )
