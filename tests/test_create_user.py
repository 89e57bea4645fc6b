import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.errors import EmailTakenError
from app.core.errors import PhoneNumberTakenError
from app.core.errors import UsernameUnavailableError
from app.models import Coach
from app.models import User
from app.schemas import RegisterRequest
from user.create import _violated_column
from user.create import create_user
from user.get import count_users_by_name
from user.get import get_user_by_email
from user.get import get_user_by_phone_number


@pytest.fixture
def payload(registration_data) -> RegisterRequest:
    return RegisterRequest.model_validate(registration_data)


async def test_create_user_persists_fields(db_session, payload):
    user = await create_user(db_session, payload, "hashed")

    assert user.id is not None
    assert user.username == "ana.gomez"
    assert user.hashed_password == "hashed"
    assert (await get_user_by_email(db_session, "a@b.com")).id == user.id
    assert (await get_user_by_phone_number(db_session, "+15551234567")).id == user.id
    assert await count_users_by_name(db_session, "Ana", "Gomez") == 1
    assert await count_users_by_name(db_session, "ana", "gomez") == 0


async def test_username_taken_by_someone_else_moves_to_next_suffix(db_session, add_user, payload):
    await add_user(first_name="Someone", last_name="Else", username="ana.gomez")

    user = await create_user(db_session, payload, "hashed")

    assert user.username == "ana.gomez1"


async def test_username_attempts_are_bounded(db_session, add_user, payload, monkeypatch):
    monkeypatch.setattr(settings, "USERNAME_MAX_ATTEMPTS", 1)
    await add_user(first_name="Someone", last_name="Else", username="ana.gomez")

    with pytest.raises(UsernameUnavailableError):
        await create_user(db_session, payload, "hashed")


async def test_email_registered_concurrently_maps_to_conflict(db_session, add_user, payload):
    await add_user(email="a@b.com")

    with pytest.raises(EmailTakenError):
        await create_user(db_session, payload, "hashed")


async def test_phone_registered_concurrently_maps_to_conflict(db_session, add_user, payload):
    await add_user(email="other@b.com", phone_number="+15551234567")

    with pytest.raises(PhoneNumberTakenError):
        await create_user(db_session, payload, "hashed")


async def test_coach_profile_failure_rolls_back_user(db_session, registration_data, monkeypatch):
    payload = RegisterRequest.model_validate({**registration_data, "role": "COACH"})
    monkeypatch.setattr("user.create.Coach", lambda user_id: Coach(user_id=999_999))

    with pytest.raises(IntegrityError):
        await create_user(db_session, payload, "hashed")

    assert (await db_session.execute(select(User))).scalars().all() == []
    assert (await db_session.execute(select(Coach))).scalars().all() == []


class UniqueViolation(Exception):
    def __init__(self, message: str, constraint_name: str):
        super().__init__(message)
        self.constraint_name = constraint_name


def integrity_error(message: str, cause: Exception | None = None) -> IntegrityError:
    orig = Exception(message)
    orig.__cause__ = cause
    return IntegrityError("INSERT INTO users", {}, orig)


def test_constraint_name_wins_over_message_text():
    message = (
        'duplicate key value violates unique constraint "ix_users_email"\n'
        "DETAIL:  Key (email)=(ix_users_phone_number@b.com) already exists."
    )
    error = integrity_error(message, UniqueViolation(message, "ix_users_email"))

    assert _violated_column(error) == "email"


def test_unknown_constraint_name_is_not_guessed_from_message():
    message = "DETAIL:  Key (note)=(users.email) already exists."
    error = integrity_error(message, UniqueViolation(message, "ix_users_note"))

    assert _violated_column(error) is None


def test_message_fallback_ignores_detail_line():
    error = integrity_error(
        "UNIQUE constraint failed: users.phone_number\n"
        "DETAIL:  Key (email)=(users.email@b.com) already exists."
    )

    assert _violated_column(error) == "phone_number"
