import re
from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import EmailStr
from pydantic import Field
from pydantic import field_validator

PHONE_SEPARATORS = re.compile(r"[\s\-.()]")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{7,14}$")


class Role(str, Enum):
    """Account roles"""

    USER = "USER"
    COACH = "COACH"
    DELETED = "DELETED"


REGISTRABLE_ROLES = frozenset({Role.USER, Role.COACH})


class RegisterRequest(BaseModel):
    """Self-registration payload. Field aliases match the public JSON names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: EmailStr = Field(..., examples=["ana@example.com"])
    first_name: str = Field(
        ..., alias="firstName", min_length=1, max_length=50, examples=["Ana"]
    )
    last_name: str = Field(
        ..., alias="lastName", min_length=1, max_length=50, examples=["Gomez"]
    )
    password: str = Field(..., min_length=8, max_length=72, examples=["Secret123!"])
    role: Role = Field(..., examples=[Role.USER])
    phone_number: str = Field(..., alias="phoneNumber", examples=["+15551234567"])

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        if not any(c.islower() for c in value):
            raise ValueError("Password must contain a lowercase letter")
        if not any(c.isupper() for c in value):
            raise ValueError("Password must contain an uppercase letter")
        if not any(c.isdigit() for c in value):
            raise ValueError("Password must contain a digit")
        if all(c.isalnum() for c in value):
            raise ValueError("Password must contain a special character")
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes long")
        return value

    @field_validator("role")
    @classmethod
    def check_role(cls, value: Role) -> Role:
        if value not in REGISTRABLE_ROLES:
            raise ValueError(f"Role {value.value} cannot be chosen at registration")
        return value

    @field_validator("phone_number", mode="before")
    @classmethod
    def normalize_phone_number(cls, value):
        if not isinstance(value, str):
            return value
        cleaned = PHONE_SEPARATORS.sub("", value)
        if not PHONE_PATTERN.match(cleaned):
            raise ValueError("Phone number must contain 8 to 15 digits")
        return cleaned

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return (
            f"RegisterRequest(email={self.email!r}, first_name={self.first_name!r}, "
            f"last_name={self.last_name!r}, role={self.role.value}, "
            f"phone_number={self.phone_number!r})"
        )

    __str__ = __repr__


class RegisterSuccess(BaseModel):
    success: str = "Verification email sent."


class ErrorMessage(BaseModel):
    error: str
    correlation_id: str | None = Field(None, alias="correlationId")
