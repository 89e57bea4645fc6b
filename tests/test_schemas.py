import pytest
from pydantic import ValidationError

from app.schemas import RegisterRequest
from app.schemas import Role


def test_register_request_normalizes_input(registration_data):
    registration_data.update(
        email="Ana.Gomez@Example.COM",
        firstName="  Ana ",
        phoneNumber="+1 555.123.4567",
        role="COACH",
    )

    payload = RegisterRequest.model_validate(registration_data)

    assert payload.email == "ana.gomez@example.com"
    assert payload.first_name == "Ana"
    assert payload.phone_number == "+15551234567"
    assert payload.role is Role.COACH
    assert payload.full_name == "Ana Gomez"


def test_password_is_kept_verbatim(registration_data):
    registration_data["password"] = " Secret123! "

    payload = RegisterRequest.model_validate(registration_data)

    assert payload.password == " Secret123! "


def test_repr_leaves_out_password(registration_data):
    payload = RegisterRequest.model_validate(registration_data)

    assert "Secret123!" not in repr(payload)
    assert "Secret123!" not in str(payload)


def test_password_longer_than_bcrypt_limit_is_rejected(registration_data):
    registration_data["password"] = "Aa1!" + "é" * 40

    with pytest.raises(ValidationError) as exc_info:
        RegisterRequest.model_validate(registration_data)

    assert exc_info.value.errors()[0]["loc"] == ("password",)
