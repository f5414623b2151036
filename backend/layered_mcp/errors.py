"""Error objects and exception types shared across the server."""

from __future__ import annotations

import traceback
from typing import Any, Mapping

from pydantic import ValidationError

DOMAIN_NOT_FOUND = "DOMAIN_NOT_FOUND"
FEATURE_NOT_FOUND = "FEATURE_NOT_FOUND"
MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
MODELS_NOT_FOUND = "MODELS_NOT_FOUND"
OPERATION_NOT_FOUND = "OPERATION_NOT_FOUND"
TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
VALIDATION_ERROR = "VALIDATION_ERROR"
UNCAUGHT_EXCEPTION = "UNCAUGHT_EXCEPTION"

UNCAUGHT_EXCEPTION_MESSAGE = "An uncaught exception occurred while executing the feature."


class McpServerError(Exception):
    """Raised when the server cannot be built or started as configured."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None):
        super().__init__(message)
        self.details = dict(details or {})


class ModelValidationError(Exception):
    """Raised by the model layer when data fails field validation."""

    def __init__(self, model_name: str, keys_to_errors: Mapping[str, list[str]]):
        super().__init__(f"validation failed for {model_name}")
        self.model_name = model_name
        self.keys_to_errors = {key: list(errors) for key, errors in keys_to_errors.items()}


class ErrorObjectError(Exception):
    """Carries a ready-made error object out of a feature that raises it."""

    def __init__(self, error_object: Mapping[str, Any]):
        error = error_object.get("error")
        message = error.get("message") if isinstance(error, Mapping) else error
        super().__init__(str(message or "error object raised"))
        self.error_object = dict(error_object)


def create_error_object(
    code: str,
    message: str,
    cause: Any = None,
    *,
    details: Any = None,
    data: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build ``{"error": {...}}``.

    An exception ``cause`` contributes its message as ``details`` plus
    ``errorDetails`` and ``trace``; a mapping cause is merged into the error.
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if isinstance(cause, BaseException):
        error["details"] = str(cause)
        error["errorDetails"] = f"{type(cause).__name__}: {cause}"
        if cause.__traceback__ is not None:
            error["trace"] = "".join(traceback.format_exception(cause))
    elif isinstance(cause, Mapping):
        error.update(cause)
    elif cause is not None:
        error["details"] = str(cause)
    if details is not None:
        error["details"] = details
    if data:
        error["data"] = dict(data)
    return {"error": error}


def is_error_object(value: Any) -> bool:
    """Any mapping with a non-null ``error`` key counts, whatever its shape."""
    return isinstance(value, Mapping) and value.get("error") is not None


def domain_not_found() -> dict[str, Any]:
    return create_error_object(DOMAIN_NOT_FOUND, "Domain not found")


def feature_not_found() -> dict[str, Any]:
    return create_error_object(FEATURE_NOT_FOUND, "Feature not found")


def model_not_found() -> dict[str, Any]:
    return create_error_object(MODEL_NOT_FOUND, "Model not found")


def models_not_found() -> dict[str, Any]:
    return create_error_object(MODELS_NOT_FOUND, "Models not found")


def operation_not_found() -> dict[str, Any]:
    return create_error_object(OPERATION_NOT_FOUND, "Operation not found")


def tool_not_found(name: str) -> dict[str, Any]:
    return create_error_object(TOOL_NOT_FOUND, f"Unknown tool: {name}")


def invalid_arguments(name: str, exc: ValidationError) -> dict[str, Any]:
    return create_error_object(
        INVALID_ARGUMENTS,
        f"Invalid arguments for tool {name}",
        details=exc.errors(include_url=False, include_context=False, include_input=False),
    )


def validation_error(exc: ModelValidationError) -> dict[str, Any]:
    return create_error_object(
        VALIDATION_ERROR,
        "Validation Error",
        details={"keysToErrors": exc.keys_to_errors, "modelName": exc.model_name},
    )


def uncaught_exception(exc: BaseException) -> dict[str, Any]:
    return create_error_object(UNCAUGHT_EXCEPTION, UNCAUGHT_EXCEPTION_MESSAGE, exc)


__all__ = [
    "DOMAIN_NOT_FOUND",
    "ErrorObjectError",
    "FEATURE_NOT_FOUND",
    "INVALID_ARGUMENTS",
    "MODELS_NOT_FOUND",
    "MODEL_NOT_FOUND",
    "McpServerError",
    "ModelValidationError",
    "OPERATION_NOT_FOUND",
    "TOOL_NOT_FOUND",
    "UNCAUGHT_EXCEPTION",
    "VALIDATION_ERROR",
    "create_error_object",
    "domain_not_found",
    "feature_not_found",
    "invalid_arguments",
    "is_error_object",
    "model_not_found",
    "models_not_found",
    "operation_not_found",
    "tool_not_found",
    "uncaught_exception",
    "validation_error",
]
