"""Map reporting errors onto HTTP errors.

All errors use standard FastAPI HTTPException, which returns:
   {"detail": "Human-readable error message"}
"""

from fastapi import HTTPException, status

from fieldreports.core.exceptions import (
    QueryFailure,
    RenderFailure,
    ReportingError,
    ScheduleConflict,
    ScheduleNotFound,
    ValidationFailure,
)

STATUS_CODES = {
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    ScheduleNotFound: status.HTTP_404_NOT_FOUND,
    ScheduleConflict: status.HTTP_409_CONFLICT,
    QueryFailure: status.HTTP_502_BAD_GATEWAY,
    RenderFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: ReportingError) -> HTTPException:
    for error_type, code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
