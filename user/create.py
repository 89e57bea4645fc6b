"""Create a new user module."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.custom_logging import logger
from app.core.errors import EmailTakenError
from app.core.errors import PhoneNumberTakenError
from app.core.errors import UsernameUnavailableError
from app.models.coaches import Coach
from app.models.users import User
from app.schemas import RegisterRequest
from app.schemas import Role
from user.get import count_users_by_name
from user.username import build_username


def _violated_column(error: IntegrityError) -> str | None:
    """
    Name the unique column behind an IntegrityError.

    asyncpg exposes the violated unique index (``ix_users_email``) or
    constraint (``users_email_key``) as ``constraint_name`` on the driver
    error. SQLite only names the column in its message (``UNIQUE constraint
    failed: users.email``).
    """
    columns = ("phone_number", "username", "email")
    constraint = getattr(error.orig, "constraint_name", None) or getattr(
        error.orig.__cause__, "constraint_name", None
    )
    if constraint:
        for column in columns:
            if constraint in (f"ix_users_{column}", f"users_{column}_key"):
                return column
        return None

    # the DETAIL line repeats the offending value, which may contain a marker
    detail = str(error.orig).split("DETAIL")[0]
    for column in columns:
        if f"users.{column}" in detail:
            return column
    return None


async def create_user(
    db: AsyncSession,
    user: RegisterRequest,
    hashed_password: str,
) -> User:
    """
    Persist a new user, plus a coach profile for COACH users.

    Both rows are committed in one transaction. The username is derived from
    the names and the number of namesakes already registered; if another
    request takes that username first, the next suffix is tried, up to
    ``USERNAME_MAX_ATTEMPTS`` times. Email and phone number collisions that
    slip past the earlier lookups are reported as the usual conflicts.

    Args:
        db (AsyncSession): The SQLAlchemy async database session.
        user (RegisterRequest): Validated registration input.
        hashed_password (str): bcrypt hash of the password.

    Returns:
        User: The newly created user object.

    Raises:
        EmailTakenError: If the email was registered concurrently.
        PhoneNumberTakenError: If the phone number was registered concurrently.
        UsernameUnavailableError: If no free username was found.
        IntegrityError: For any other constraint violation.
    """
    namesakes = await count_users_by_name(db, user.first_name, user.last_name)

    for attempt in range(settings.USERNAME_MAX_ATTEMPTS):
        db_user = User()
        db_user.email = user.email
        db_user.first_name = user.first_name
        db_user.last_name = user.last_name
        db_user.role = user.role
        db_user.phone_number = user.phone_number
        db_user.username = build_username(
            user.first_name, user.last_name, namesakes + attempt
        )
        db_user.hashed_password = hashed_password
        db_user.is_verified = False

        try:
            db.add(db_user)
            await db.flush()
            if user.role == Role.COACH:
                db.add(Coach(user_id=db_user.id))
                await db.flush()
            await db.commit()

        except IntegrityError as e:
            await db.rollback()
            column = _violated_column(e)
            logger.warning(
                "Database IntegrityError",
                extra={"constraint": str(e.orig), "username": db_user.username},
            )

            if column == "username":
                continue
            if column == "email":
                raise EmailTakenError from e
            if column == "phone_number":
                raise PhoneNumberTakenError from e
            raise

        logger.info(f"Created {user.role.value} user {db_user.username} (id={db_user.id})")
        return db_user

    raise UsernameUnavailableError
