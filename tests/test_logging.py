import logging

import pytest

from app.core.custom_logging import SensitiveDataFilter
from app.core.custom_logging import log_execution
from app.core.errors import EmailTakenError
from app.core.errors import RegistrationError


@pytest.mark.parametrize(
    ("message", "secret"),
    [
        ('{"email": "a@b.com", "password": "Secret123!"}', "Secret123!"),
        ("RegisterRequest(password='Secret123!', role=USER)", "Secret123!"),
        ("login attempt password=Secret123! from 10.0.0.1", "Secret123!"),
        ("hashed_password: $2b$10$abcdefghij", "$2b$10$abcdefghij"),
    ],
)
def test_filter_masks_passwords(message, secret):
    record = logging.LogRecord("coach_api", logging.INFO, __file__, 1, message, None, None)

    assert SensitiveDataFilter().filter(record) is True
    assert secret not in record.getMessage()
    assert SensitiveDataFilter.MASK in record.getMessage()


def test_filter_leaves_other_messages_alone():
    record = logging.LogRecord(
        "coach_api", logging.INFO, __file__, 1, "Created %s user %s", ("USER", "ana.gomez"), None
    )

    SensitiveDataFilter().filter(record)

    assert record.getMessage() == "Created USER user ana.gomez"


@log_execution(expected=(RegistrationError,))
async def register_twice():
    raise EmailTakenError


@log_execution(expected=(RegistrationError,))
async def crash():
    raise RuntimeError("disk full")


async def test_expected_failures_are_logged_as_warnings(caplog):
    with caplog.at_level(logging.DEBUG, logger="coach_api"):
        with pytest.raises(EmailTakenError):
            await register_twice()

    failures = [r for r in caplog.records if r.getMessage().startswith("FAILED")]
    assert [r.levelno for r in failures] == [logging.WARNING]
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


async def test_unexpected_failures_are_logged_as_errors(caplog):
    with caplog.at_level(logging.DEBUG, logger="coach_api"):
        with pytest.raises(RuntimeError):
            await crash()

    failures = [r for r in caplog.records if r.getMessage().startswith("FAILED")]
    assert [r.levelno for r in failures] == [logging.ERROR]
    assert "disk full" in failures[0].getMessage()
