"""Self-registration workflow."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from prometheus_client import Counter
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.auth.auth import get_password_hash
from app.core.custom_logging import log_execution
from app.core.custom_logging import logger
from app.core.errors import EmailBannedError
from app.core.errors import EmailTakenError
from app.core.errors import PhoneNumberTakenError
from app.core.errors import RegistrationError
from app.core.errors import VerificationEmailError
from app.db.session import get_db
from app.emails.verification import verify_email_template
from app.models.users import User
from app.schemas import RegisterRequest
from app.schemas import Role
from app.services.email import EmailClient
from app.services.email import get_email_client
from app.services.verification import generate_verification_code
from user.create import create_user
from user.get import get_user_by_email
from user.get import get_user_by_phone_number

VERIFICATION_SUBJECT = "Email verification"

REGISTRATIONS = Counter(
    "user_registrations",
    "Self-registration attempts by outcome",
    ["outcome"],
)

CodeGenerator = Callable[[AsyncSession, str], Awaitable[str]]


class RegistrationHandler:
    """
    Registers a new account and sends the email verification code.

    Collaborators are passed in rather than imported at call time so that
    each request gets its own session and tests can swap the email client
    or the code generator.

    Steps:
        1. reject banned or already registered emails
        2. reject already registered phone numbers (no DELETED exemption)
        3. hash the password
        4. create the user (and coach profile) with a derived username
        5. generate a verification code and email it

    A failed delivery raises VerificationEmailError; the user stays
    persisted with ``is_verified`` False.
    """

    def __init__(
        self,
        db: AsyncSession,
        email_client: EmailClient,
        code_generator: CodeGenerator = generate_verification_code,
    ):
        self.db = db
        self.email_client = email_client
        self.code_generator = code_generator

    async def ensure_available(self, payload: RegisterRequest) -> None:
        existing = await get_user_by_email(self.db, payload.email)
        if existing is not None:
            if existing.role == Role.DELETED:
                REGISTRATIONS.labels("banned").inc()
                logger.warning(f"Registration refused, banned email: {payload.email}")
                raise EmailBannedError
            REGISTRATIONS.labels("email_taken").inc()
            logger.warning(f"Registration refused, email taken: {payload.email}")
            raise EmailTakenError

        if await get_user_by_phone_number(self.db, payload.phone_number) is not None:
            REGISTRATIONS.labels("phone_taken").inc()
            logger.warning(
                f"Registration refused, phone number taken: {payload.phone_number}"
            )
            raise PhoneNumberTakenError

    async def send_verification(self, user: User) -> None:
        code = await self.code_generator(self.db, user.email)
        body = verify_email_template(code, user.full_name)

        sent = await self.email_client.send(user.email, VERIFICATION_SUBJECT, body)
        if not sent:
            REGISTRATIONS.labels("email_failed").inc()
            logger.error(f"Verification email to {user.email} failed, user {user.id} left unverified")
            raise VerificationEmailError

    @log_execution(expected=(RegistrationError,))
    async def register(self, payload: RegisterRequest) -> User:
        """
        Run the registration workflow for validated input.

        Args:
            payload (RegisterRequest): Validated registration data.

        Returns:
            User: The created, still unverified user.

        Raises:
            ConflictError: For banned, duplicate email or phone number.
            VerificationEmailError: If the email could not be delivered.
        """
        await self.ensure_available(payload)

        hashed_password = await run_in_threadpool(get_password_hash, payload.password)
        user = await create_user(self.db, payload, hashed_password)

        await self.send_verification(user)

        REGISTRATIONS.labels("success").inc()
        return user


def get_registration_handler(
    db: Annotated[AsyncSession, Depends(get_db)],
    email_client: Annotated[EmailClient, Depends(get_email_client)],
) -> RegistrationHandler:
    return RegistrationHandler(db, email_client)
