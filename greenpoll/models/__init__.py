# Import ALL models so SQLAlchemy registers them
from .user import User  # noqa: F401
from .session import Session  # noqa: F401
from .tokens import Verification, PasswordReset  # noqa: F401
from .polls import Poll  # noqa: F401
from .option import PollOption  # noqa: F401
from .vote import PollVote  # noqa: F401

__all__ = [
    "User",
    "Session",
    "Verification",
    "PasswordReset",
    "Poll",
    "PollOption",
    "PollVote",
]
