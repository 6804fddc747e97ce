"""
Domain-specific exceptions for Condition Studio.

These exceptions represent block tree and compilation failures and are
mapped to appropriate HTTP status codes in the API layer.
"""

from typing import Any


class ConditionStudioError(Exception):
    """Base exception for all condition studio domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ConditionStudioError):
    """
    Raised when input data fails validation.

    Examples:
    - Block tree deeper than the configured limit
    - Comparator outside the allowed set
    - Block kind dropped onto a slot that does not accept it
    - Malformed condition document

    HTTP Status: 400 Bad Request
    """

    pass


class ChainValidationError(ValidationError):
    """
    Raised when a user-entered chain id is not one of the supported chains.

    The message always enumerates the valid chain ids.

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(ConditionStudioError):
    """
    Raised when a requested element does not exist.

    Examples:
    - Template id not in the catalog
    - Path segment that does not lead to a connected block
    - Slot id not present on the addressed block

    HTTP Status: 404 Not Found
    """

    pass


class ConflictError(ConditionStudioError):
    """
    Raised when an edit conflicts with the current tree state.

    Examples:
    - Attaching to an operator whose maxInputs bound is reached

    HTTP Status: 409 Conflict
    """

    pass


class CompilationError(ConditionStudioError):
    """
    Raised when strict compilation cannot produce a condition.

    Examples:
    - Unsupported conditionType
    - Contract condition without a method
    - Malformed numeric value in a return value test

    HTTP Status: 422 Unprocessable Entity
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ValidationError: 400,
    ChainValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    CompilationError: 422,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
