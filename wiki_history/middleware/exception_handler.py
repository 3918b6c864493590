"""Exception handler turning WikiException into structured JSON responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import WikiException

logger = logging.getLogger(__name__)


async def wiki_exception_handler(request: Request, exc: WikiException) -> JSONResponse:
    """
    Log a WikiException and return its to_dict() body with its status code.

    Server-side failures (integrity, database) log at ERROR; client errors
    such as a missing page or a rejected move log at WARNING.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"WikiException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
