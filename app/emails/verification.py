from jinja2 import Environment
from jinja2 import select_autoescape

from app.core.config import settings

env = Environment(autoescape=select_autoescape(default_for_string=True))

VERIFY_EMAIL_TEMPLATE = env.from_string(
    """\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #222;">
    <h2>Welcome to {{ project_name }}, {{ full_name }}!</h2>
    <p>Use the code below to verify your email address:</p>
    <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px;">{{ code }}</p>
    <p>The code expires in {{ expire_minutes }} minutes.</p>
    <p>If you did not create an account, you can ignore this email.</p>
  </body>
</html>
"""
)


def verify_email_template(code: str, full_name: str) -> str:
    """Render the verification email body. ``full_name`` is HTML-escaped."""
    return VERIFY_EMAIL_TEMPLATE.render(
        code=code,
        full_name=full_name,
        project_name=settings.PROJECT_NAME,
        expire_minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES,
    )
