import logging
from datetime import timedelta
from typing import List, Optional

from .base import BaseService, check_length, conflict_as
from ..errors import InvalidCredentials, NotFound, ValidationError
from ..models import Poll, Session, User
from ..utils import clock

logger = logging.getLogger(__name__)


class UserService(BaseService):
    def create_user(self, username: str, email: str, password: str) -> User:
        """
        Validate and persist a new, unverified user.

        Checks run in a fixed order and the first failure wins: username
        taken, email taken, username length, email length, password length.
        Nothing is written until every check passes. The unique columns stay
        the authority if two registrations race past the checks.
        """
        if self.user_exists_for_username(username):
            raise ValidationError("Username is in use", field="username")
        if self.user_exists_for_email(email):
            raise ValidationError("Email is in use", field="email")
        check_length("Username", username, User.USERNAME_MIN, User.USERNAME_MAX, field="username")
        check_length("Email", email, User.EMAIL_MIN, User.EMAIL_MAX, field="email")
        check_length("Password", password, User.PASSWORD_MIN, User.PASSWORD_MAX, field="password")

        password_hash = self.services.hasher.hash(password)

        with conflict_as(ValidationError("Username or email is in use")):
            user = self.store.execute(
                "user.create", username=username, email=email, password_hash=password_hash
            )[0]

        logger.info("User registered user_id=%s", user.id)
        return user

    def user_exists(self, user_id: int) -> bool:
        return bool(self.store.execute("user.get", user_id=user_id))

    def user_exists_for_username(self, username: str) -> bool:
        return bool(self.store.execute("user.get_by_username", username=username))

    def user_exists_for_email(self, email: str) -> bool:
        return bool(self.store.execute("user.get_by_email", email=email))

    def get_user(self, user_id: int) -> User:
        user = self._first("user.get", user_id=user_id)
        if user is None:
            raise NotFound("User does not exist")
        return user

    def get_user_by_username(self, username: str) -> User:
        user = self._first("user.get_by_username", username=username)
        if user is None:
            raise NotFound("User does not exist")
        return user

    def get_user_by_email(self, email: str) -> User:
        user = self._first("user.get_by_email", email=email)
        if user is None:
            raise NotFound("User does not exist")
        return user

    def set_username(self, user_id: int, username: str) -> None:
        # The caller's own row counts as a taken username
        if self.user_exists_for_username(username):
            raise ValidationError("Username is in use", field="username")
        check_length("Username", username, User.USERNAME_MIN, User.USERNAME_MAX, field="username")

        with conflict_as(ValidationError("Username is in use", field="username")):
            self.store.execute("user.set_username", user_id=user_id, username=username)

    def set_email(self, user_id: int, email: str) -> None:
        if self.user_exists_for_email(email):
            raise ValidationError("Email is in use", field="email")
        check_length("Email", email, User.EMAIL_MIN, User.EMAIL_MAX, field="email")

        with conflict_as(ValidationError("Email is in use", field="email")):
            self.store.execute("user.set_email", user_id=user_id, email=email)

    def set_password(self, user_id: int, password: str) -> None:
        check_length("Password", password, User.PASSWORD_MIN, User.PASSWORD_MAX, field="password")
        password_hash = self.services.hasher.hash(password)
        self.store.execute("user.set_password", user_id=user_id, password_hash=password_hash)

    def set_verified(self, user_id: int, verified: bool = True) -> None:
        self.store.execute("user.set_verified", user_id=user_id, verified=verified)

    def get_user_polls(self, user_id: int) -> List[Poll]:
        return self.store.execute("user.get_polls", user_id=user_id)

    def get_user_vote_polls(self, user_id: int) -> List[Poll]:
        return self.store.execute("user.get_vote_polls", user_id=user_id)

    def login(self, email: str, password: str) -> Session:
        """
        Check credentials and open a new session.

        An unknown email and a wrong password fail the same way.
        """
        user: Optional[User] = self._first("user.get_by_email", email=email)

        if user is None:
            # Burn comparable time so response latency does not reveal the miss
            self.services.hasher.verify_dummy(password)
            raise InvalidCredentials()
        if not self.services.hasher.verify(password, user.password_hash):
            raise InvalidCredentials()

        return self.services.sessions.create_session(user.id)

    def delete_user(self, user_id: int) -> None:
        # Sessions, polls, votes and tokens go with the user (FK cascades)
        self.store.execute("user.delete", user_id=user_id)
        logger.info("User deleted user_id=%s", user_id)

    def prune_unverified_users(self) -> List[int]:
        ttl = timedelta(seconds=self.config["VERIFY_TTL_SECONDS"])
        deleted = self.store.execute("user.prune_unverified", joined_before=clock.utcnow() - ttl)
        if deleted:
            logger.info("Pruned %d unverified user(s)", len(deleted))
        return deleted
