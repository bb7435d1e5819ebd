"""Exception handlers for the transcript mockup FastAPI application.

This module defines custom exception handlers that convert Python exceptions
into consistent, user-friendly JSON responses.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from transcript.persistence import DocumentFormatError

logger = logging.getLogger(__name__)


# Custom Exception Classes
# These let you raise specific, meaningful errors in your route handlers


class ParticipantNotFoundError(Exception):
    """Raised when a request names a participant that doesn't exist.

    Args:
        participant_id: The id that wasn't found.
        available_ids: Ids of the current participants.
    """

    def __init__(self, participant_id: str, available_ids: list[str]):
        self.participant_id = participant_id
        self.available_ids = available_ids
        super().__init__(f"Participant '{participant_id}' not found")


class CommandRejectedError(Exception):
    """Raised when the store refuses a command that passed input validation.

    Args:
        operation: The operation that was rejected.
        message: Why it was rejected.
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(message)


# Exception Handlers
# These convert exceptions into JSON responses


async def participant_not_found_handler(request: Request, exc: ParticipantNotFoundError):
    """Handle ParticipantNotFoundError exceptions.

    Returns a 404 with the requested id and the ids that do exist.

    Args:
        request: The incoming request that triggered the error.
        exc: The ParticipantNotFoundError exception.

    Returns:
        JSONResponse with 404 status and helpful details.
    """
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Participant Not Found",
            "detail": f"The participant '{exc.participant_id}' does not exist",
            "requested_participant": exc.participant_id,
            "available_participants": exc.available_ids,
        },
    )


async def command_rejected_handler(request: Request, exc: CommandRejectedError):
    """Handle CommandRejectedError exceptions.

    Returns a 409 (Conflict): the request was well formed but does not fit
    the current conversation.

    Args:
        request: The incoming request that triggered the error.
        exc: The CommandRejectedError exception.

    Returns:
        JSONResponse with 409 status.
    """
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "Command Rejected",
            "detail": exc.message,
            "operation": exc.operation,
        },
    )


async def document_format_handler(request: Request, exc: DocumentFormatError):
    """Handle DocumentFormatError exceptions raised by imports.

    Args:
        request: The incoming request that triggered the error.
        exc: The DocumentFormatError exception.

    Returns:
        JSONResponse with 400 status.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Document",
            "detail": str(exc),
            "type": "DocumentFormatError",
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors.

    These occur when data built inside a handler doesn't match a Pydantic model.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with validation error details.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False, include_context=False),
        },
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions.

    ValueErrors typically indicate invalid input values that passed Pydantic
    validation but failed command validation (an empty date marker label,
    an audio message without a duration, ...).

    Args:
        request: The incoming request that triggered the error.
        exc: The ValueError exception.

    Returns:
        JSONResponse with error details.
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Value",
            "detail": str(exc),
            "type": "ValueError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    This is a catch-all handler for unexpected errors. It prevents
    stack traces from being exposed to clients.

    Args:
        request: The incoming request that triggered the error.
        exc: The exception that was raised.

    Returns:
        JSONResponse with generic error message.
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
