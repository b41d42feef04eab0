"""Custom exception classes for the application."""

from typing import Any

from blogai.core.retry import is_transient_message


class BlogAIError(Exception):
    """Base exception for all application errors."""

    code = "INTERNAL_ERROR"
    retryable = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Validation Errors
class ValidationError(BlogAIError):
    """Malformed or out-of-range input, detected before any AI or DB call."""

    code = "INVALID_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        if code:
            self.code = code


class PromptValidationError(ValidationError):
    """A prompt template references variables that were not supplied."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing prompt variables: {', '.join(missing)}",
            details={"missing": missing},
        )
        self.missing = missing


# AI Errors
class AIServiceError(BlogAIError):
    """The generative model call failed or returned unusable output."""

    code = "AI_SERVICE_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)
        self.retryable = is_transient_message(message)


class ParseError(AIServiceError):
    """The model reply had no parsable JSON block or lacked a required field."""

    code = "AI_PARSE_ERROR"


# Data Errors
class NotFoundError(BlogAIError):
    """Referenced record does not exist."""

    code = "NOT_FOUND"


class PostNotFoundError(NotFoundError):
    """Post not found."""

    code = "POST_NOT_FOUND"

    def __init__(self, post_id: str) -> None:
        super().__init__(f"Post not found: {post_id}", {"post_id": post_id})


class CategoryNotFoundError(NotFoundError):
    """Category not found."""

    code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str) -> None:
        super().__init__(f"Category not found: {category_id}", {"category_id": category_id})


class PersistenceError(BlogAIError):
    """Database transaction failed."""

    code = "PERSISTENCE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.retryable = retryable
