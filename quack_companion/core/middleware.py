# quack_companion/core/middleware.py
import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.errors import ApiError, MissingCredentialsError, QuackError

logger = logging.getLogger(__name__)


def status_code_for(error: QuackError) -> int:
    if isinstance(error, ApiError):
        return error.status_code
    if isinstance(error, MissingCredentialsError):
        return 401
    # Transport and parse failures come from the upstream service
    return 502


async def quack_error_handler(request: Request, exc: QuackError) -> JSONResponse:
    logger.error(f"Quack Error: {exc.message}")
    return JSONResponse(status_code=status_code_for(exc), content=exc.to_dict())


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except QuackError as e:
            return await quack_error_handler(request, e)
        except Exception as e:
            logger.exception(f"Unexpected Error: {str(e)}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": "An unexpected error occurred",
                        "details": str(e)
                    },
                    "success": False,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }
            )
