# app/errors.py
"""
JSON error bodies.

Every error the API returns has the shape {"error": <message>, "code": <code>},
plus optional extra flags (e.g. needsUpgrade). Clients branch on "code".
"""
from __future__ import annotations

from fastapi import HTTPException, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


def error_response(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    body = {"error": message, "code": code}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def api_error(status_code: int, message: str, code: str) -> HTTPException:
    """HTTPException whose detail renders as a standard error body."""
    return HTTPException(status_code=status_code, detail={"error": message, "code": code})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Flatten HTTPException details into the standard error body."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = {"error": str(exc.detail), "code": f"http_{exc.status_code}"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()]
    return error_response(
        400,
        "Invalid request",
        "invalid_input",
        fields=[f for f in fields if f],
    )
