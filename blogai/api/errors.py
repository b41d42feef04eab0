"""Translate service results into HTTP responses."""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from blogai.schemas.result import ServiceError, ServiceResult

STATUS_BY_ERROR_CODE = {
    "INVALID_REQUEST": status.HTTP_400_BAD_REQUEST,
    "INVALID_CONTENT": status.HTTP_400_BAD_REQUEST,
    "CONTENT_TOO_SHORT": status.HTTP_400_BAD_REQUEST,
    "CONTENT_TOO_LONG": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "POST_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CATEGORY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PERSISTENCE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for_error(error: ServiceError) -> int:
    """HTTP status for a failed result; unknown codes are upstream AI failures."""
    if error.code in STATUS_BY_ERROR_CODE:
        return STATUS_BY_ERROR_CODE[error.code]
    if error.retryable:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_502_BAD_GATEWAY


def result_response(result: ServiceResult[Any]) -> JSONResponse:
    """Serialize the camelCase envelope with a status that matches its outcome."""
    status_code = status.HTTP_200_OK
    if not result.success and result.error is not None:
        status_code = status_for_error(result.error)
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
