"""Registration error taxonomy.

Each error carries the HTTP status and the client-facing message so the
route can turn it into ``{"error": message}`` without a lookup table.
"""

import uuid

from starlette import status
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.custom_logging import logger


class RegistrationError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Registration failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ConflictError(RegistrationError):
    """The account collides with an existing one."""


class EmailBannedError(ConflictError):
    message = "This email is banned from the platform."


class EmailTakenError(ConflictError):
    message = "User with this email already exists."


class PhoneNumberTakenError(ConflictError):
    message = "User with this phone number already exists."


class UsernameUnavailableError(ConflictError):
    message = "Could not allocate a unique username."


class DeliveryError(RegistrationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Failed to deliver message."


class VerificationEmailError(DeliveryError):
    message = "Failed to send verification email."


class DatabaseUnavailableError(RuntimeError):
    """The engine could not be created or the database did not answer."""


def unexpected_error_response(exc: Exception) -> JSONResponse:
    """
    Build the 500 body for a fault nobody handled.

    The exception text is returned as ``error`` next to a correlation id
    that is also written to the log with the traceback. With
    ``MASK_ERROR_DETAILS`` enabled the text is replaced by a generic message.
    """
    correlation_id = str(uuid.uuid4())
    logger.error(f"Unexpected error [{correlation_id}]: {exc!s}", exc_info=exc)

    message = "An unexpected error occurred." if settings.MASK_ERROR_DETAILS else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message, "correlationId": correlation_id},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return unexpected_error_response(exc)
