import logging
from typing import List

from .base import BaseService
from ..errors import NotFound
from ..models import Session, User
from ..utils import clock
from ..utils.security import generate_opaque_id

logger = logging.getLogger(__name__)


class SessionService(BaseService):
    @property
    def max_sessions(self) -> int:
        return self.config["MAX_USER_SESSIONS"]

    def create_session(self, user_id: int) -> Session:
        """Open a session and evict the user's oldest ones beyond the cap."""
        with self.store.atomic():
            session = self.store.execute(
                "session.create",
                session_id=generate_opaque_id(),
                user_id=user_id,
                create_time=clock.utcnow(),
            )[0]
            evicted = self.store.execute(
                "session.delete_old_user_sessions",
                user_id=user_id,
                keep=self.max_sessions,
                keep_id=session.id,
            )

        if evicted:
            logger.info("Evicted %d old session(s) user_id=%s", len(evicted), user_id)
        return session

    def session_exists(self, session_id: str) -> bool:
        return bool(self.store.execute("session.get", session_id=session_id))

    def get_session(self, session_id: str) -> Session:
        session = self._first("session.get", session_id=session_id)
        if session is None:
            raise NotFound("Session does not exist")
        return session

    def get_user_by_session_id(self, session_id: str) -> User:
        user = self._first("session.get_user", session_id=session_id)
        if user is None:
            raise NotFound("User or session does not exist")
        return user

    def get_user_sessions(self, user_id: int) -> List[Session]:
        return self.store.execute("session.get_user_sessions", user_id=user_id)

    def delete_session(self, session_id: str) -> None:
        self.store.execute("session.delete", session_id=session_id)

    def delete_user_sessions(self, user_id: int) -> None:
        self.store.execute("session.delete_user_sessions", user_id=user_id)
