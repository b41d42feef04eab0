"""Uniform success/failure envelope returned by service entry points."""

from typing import Any, Generic, TypeVar

from pydantic import Field

from blogai.core.exceptions import BlogAIError
from blogai.schemas.base import CamelModel

DataT = TypeVar("DataT")


class ServiceError(CamelModel):
    """Error payload carried by a failed result."""

    code: str
    message: str
    retryable: bool = False
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BlogAIError, *, code: str | None = None) -> "ServiceError":
        return cls(
            code=code or exc.code,
            message=exc.message,
            retryable=exc.retryable,
            details=exc.details,
        )


class ServiceResult(CamelModel, Generic[DataT]):
    """Discriminated result: `data` is set iff `success`, `error` iff not."""

    success: bool
    data: DataT | None = None
    error: ServiceError | None = None
    metrics: Any | None = None

    @classmethod
    def ok(cls, data: DataT, *, metrics: Any | None = None) -> "ServiceResult[DataT]":
        return cls(success=True, data=data, metrics=metrics)

    @classmethod
    def fail(cls, error: ServiceError, *, metrics: Any | None = None) -> "ServiceResult[DataT]":
        return cls(success=False, error=error, metrics=metrics)
