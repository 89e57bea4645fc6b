from .base import Base
from .coaches import Coach
from .users import User
from .verification_codes import VerificationCode

__all__ = ["Base", "Coach", "User", "VerificationCode"]
