"""
Преобразование доменных ошибок в HTTP ответы.
"""

from fastapi import HTTPException

from ...core.errors import (
    ForbiddenError,
    LockTimeoutError,
    RecordNotFoundError,
    RecordValidationError,
    SupportDeskError,
)

_STATUS_CODES = {
    RecordValidationError: 400,
    RecordNotFoundError: 404,
    ForbiddenError: 403,
    LockTimeoutError: 503,
}


def status_code_for(error: SupportDeskError) -> int:
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500


def to_http_exception(error: SupportDeskError) -> HTTPException:
    headers = {"Retry-After": "1"} if error.retryable else None
    return HTTPException(
        status_code=status_code_for(error),
        detail=error.to_dict(),
        headers=headers
    )
