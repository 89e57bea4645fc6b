import json
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette import status

from app.core.custom_logging import logger
from app.core.errors import RegistrationError
from app.core.errors import unexpected_error_response
from app.schemas import ErrorMessage
from app.schemas import RegisterRequest
from app.schemas import RegisterSuccess
from user.register import REGISTRATIONS
from user.register import RegistrationHandler
from user.register import get_registration_handler

user_register_router = APIRouter()


def _validation_errors(err: ValidationError) -> list[dict]:
    # input values omitted, they may contain the password
    return json.loads(err.json(include_url=False, include_input=False))


async def _read_payload(request: Request) -> RegisterRequest:
    try:
        data = await request.json()
    except ValueError as e:
        raise ValidationError.from_exception_data(
            "RegisterRequest",
            [{"type": "json_invalid", "loc": ("body",), "input": None, "ctx": {"error": str(e)}}],
        ) from e
    return RegisterRequest.model_validate(data)


@user_register_router.post(
    "/register",
    response_model=RegisterSuccess,
    responses={
        400: {"description": "Invalid input, email banned or already used"},
        500: {"model": ErrorMessage},
    },
)
async def register_user(
    request: Request,
    handler: Annotated[RegistrationHandler, Depends(get_registration_handler)],
):
    """
    Register a new user and email them a verification code.

    The body is validated here rather than by FastAPI so that invalid input
    answers 400 ``{"errors": [...]}`` instead of the framework's 422.

    Responses:
        200: ``{"success": "Verification email sent."}``
        400: ``{"errors": [...]}`` for invalid input, or ``{"error": ...}``
             for a banned email, a taken email or a taken phone number.
        500: ``{"error": "Failed to send verification email."}`` or an
             unexpected error.
    """
    try:
        payload = await _read_payload(request)
    except ValidationError as e:
        REGISTRATIONS.labels("invalid").inc()
        errors = _validation_errors(e)
        logger.info(f"Registration input rejected: {[err['loc'] for err in errors]}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": errors},
        )

    try:
        await handler.register(payload)

    except RegistrationError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})

    except Exception as e:
        REGISTRATIONS.labels("error").inc()
        return unexpected_error_response(e)

    return RegisterSuccess()
