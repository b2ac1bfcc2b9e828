"""
Token ledgers: short-lived, single-use tokens keyed by email.

Verification and password-reset tokens share one shape and one lifecycle,
so both are a :class:`TokenLedger` that differ in store family, TTL and
what redeeming the token does to its user.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError

from .base import BaseService
from ..errors import InvalidToken, NotFound, StoreError
from ..models import User
from ..utils import clock
from ..utils.security import generate_opaque_id

logger = logging.getLogger(__name__)


class TokenLedger(BaseService):
    family = None
    label = "Token"

    def __init__(self, services, ttl_seconds: int):
        super().__init__(services)
        self.ttl = timedelta(seconds=ttl_seconds)

    def _op(self, name: str) -> str:
        return f"{self.family}.{name}"

    def _live_after(self) -> datetime:
        return clock.utcnow() - self.ttl

    def expires_at(self, token) -> datetime:
        return token.create_time + self.ttl

    def create(self, email: str):
        """
        Return the live token for ``email``, creating one if there is none.

        A re-request hands back the existing token untouched, so its expiry
        stays anchored to the original creation time. When two requests race
        to create, ``UNIQUE(email)`` rejects the loser, which then returns the
        winner's token.
        """
        if not self.services.users.user_exists_for_email(email):
            raise NotFound("User does not exist")

        try:
            token, created = self._get_or_insert(email)
        except StoreError as exc:
            token = self._token_after_conflict(exc, email)
            created = False

        if created:
            logger.info("%s created expires_at=%s", self.label, self.expires_at(token).isoformat())
        scheduler = self.services.scheduler
        if scheduler is not None:
            scheduler.schedule(self, token)
        return token

    def _get_or_insert(self, email: str) -> Tuple[object, bool]:
        with self.store.atomic():
            existing = self._first(self._op("get_by_email"), email=email, live_after=self._live_after())
            if existing is not None:
                return existing, False

            # An expired row the pruner has not reached yet still holds the email
            self.store.execute(self._op("delete_expired_for_email"), email=email, live_after=self._live_after())
            token = self.store.execute(
                self._op("create"),
                token_id=generate_opaque_id(),
                email=email,
                create_time=clock.utcnow(),
            )[0]
        return token, True

    def _token_after_conflict(self, exc: StoreError, email: str):
        # Inside a caller's unit the session is unusable until that unit rolls back
        if self.store.in_atomic or not isinstance(exc.__cause__, IntegrityError):
            raise exc
        token = self._first(self._op("get_by_email"), email=email, live_after=self._live_after())
        if token is None:
            raise exc
        return token

    def exists(self, token_id: str) -> bool:
        return bool(self.store.execute(self._op("get"), token_id=token_id, live_after=self._live_after()))

    def exists_for_email(self, email: str) -> bool:
        return bool(self.store.execute(self._op("get_by_email"), email=email, live_after=self._live_after()))

    def get(self, token_id: str):
        token = self._first(self._op("get"), token_id=token_id, live_after=self._live_after())
        if token is None:
            raise NotFound(f"{self.label} does not exist")
        return token

    def get_for_email(self, email: str):
        token = self._first(self._op("get_by_email"), email=email, live_after=self._live_after())
        if token is None:
            raise NotFound(f"{self.label} does not exist for given email")
        return token

    def get_all(self) -> List:
        return self.store.execute(self._op("get_all"), live_after=self._live_after())

    def get_user(self, token_id: str) -> User:
        user = self._first(self._op("get_user"), token_id=token_id, live_after=self._live_after())
        if user is None:
            raise NotFound(f"User does not exist for given {self.label.lower()}")
        return user

    def delete(self, token_id: str) -> bool:
        """Idempotent. True when this call removed the row."""
        return bool(self.store.execute(self._op("delete"), token_id=token_id)[0])

    def redeem(self, token_id: str, **kwargs) -> User:
        """
        Consume the token and apply its effect in one unit of work.

        The token is deleted before the effect runs and the effect only runs if
        this call did the deleting. If the effect fails the whole unit rolls
        back and the token stays redeemable.
        """
        with self.store.atomic():
            if not self.exists(token_id):
                raise InvalidToken()
            user = self.get_user(token_id)
            # A concurrent redeem may have consumed it since the check
            if not self.delete(token_id):
                raise InvalidToken()
            self._apply(user, **kwargs)

        logger.info("%s redeemed user_id=%s", self.label, user.id)
        return user

    def _apply(self, user: User, **kwargs) -> None:
        raise NotImplementedError

    def expire(self, token_id: str) -> None:
        """Expiry hook for the pruning scheduler: delete if still there."""
        self.delete(token_id)

    def prune(self) -> List[str]:
        pruned = self.store.execute(self._op("prune"), live_after=self._live_after())
        if pruned:
            logger.info("Pruned %d expired %s record(s)", len(pruned), self.family)
        return pruned


class VerificationLedger(TokenLedger):
    family = "verification"
    label = "Verification record"

    def _apply(self, user: User, **kwargs) -> None:
        self.services.users.set_verified(user.id)

    def expire(self, token_id: str) -> None:
        # An account nobody verified in time goes with its token
        with self.store.atomic():
            owner = self._first(self._op("get_user"), token_id=token_id, live_after=datetime.min)
            self.delete(token_id)
            if owner is not None and not owner.verified:
                self.services.users.delete_user(owner.id)


class PasswordResetLedger(TokenLedger):
    family = "password_reset"
    label = "Password reset record"

    def _apply(self, user: User, *, new_password: str, **kwargs) -> None:
        self.services.users.set_password(user.id, new_password)
