"""
Translate engine errors into HTTP responses.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from ticketing.core.config import get_settings
from ticketing.core.exceptions import ConstraintViolation, StoreUnavailable, TicketingError
from ticketing.core.logging import get_logger

logger = get_logger(__name__)


async def ticketing_error_handler(request: Request, exc: TicketingError) -> JSONResponse:
    headers = {}
    if isinstance(exc, StoreUnavailable):
        headers["Retry-After"] = str(get_settings().STORE_RETRY_AFTER)

    if isinstance(exc, ConstraintViolation):
        logger.error("constraint_violation", error=exc.message)
    elif exc.status_code >= 500:
        logger.error("request_error", code=exc.code, error=exc.message)
    else:
        logger.info("request_rejected", code=exc.code, status_code=exc.status_code)

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )
