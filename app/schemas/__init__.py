from user.user import ErrorMessage
from user.user import RegisterRequest
from user.user import RegisterSuccess
from user.user import Role

__all__ = [
    "ErrorMessage",
    "RegisterRequest",
    "RegisterSuccess",
    "Role",
]
