from datetime import UTC
from datetime import datetime

from sqlalchemy import select

from app.core.config import settings
from app.emails.verification import verify_email_template
from app.models import VerificationCode
from app.services.verification import generate_verification_code
from app.services.verification import hash_code


async def test_generate_verification_code_stores_hash(db_session):
    code = await generate_verification_code(db_session, "a@b.com")

    assert code.isdigit()
    assert len(code) == settings.VERIFICATION_CODE_LENGTH

    stored = (await db_session.execute(select(VerificationCode))).scalars().one()
    assert stored.email == "a@b.com"
    assert stored.purpose == "verification"
    assert stored.code_hash == hash_code(code)
    expires_at = stored.expires_at.replace(tzinfo=stored.expires_at.tzinfo or UTC)
    assert expires_at > datetime.now(UTC)


async def test_new_code_replaces_previous_one(db_session):
    await generate_verification_code(db_session, "a@b.com")
    latest = await generate_verification_code(db_session, "a@b.com")
    await generate_verification_code(db_session, "other@b.com")

    rows = (
        await db_session.execute(
            select(VerificationCode).where(VerificationCode.email == "a@b.com")
        )
    ).scalars().all()

    assert len(rows) == 1
    assert rows[0].code_hash == hash_code(latest)


def test_verify_email_template_contains_code_and_name():
    html = verify_email_template("482913", "Ana Gomez")

    assert "482913" in html
    assert "Ana Gomez" in html
    assert f"{settings.VERIFICATION_CODE_EXPIRE_MINUTES} minutes" in html


def test_verify_email_template_escapes_name():
    html = verify_email_template("482913", "<script>alert(1)</script> Doe")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
