"""
Domain services.

:class:`Services` is the one handle the rest of the app holds. It owns the
record store, the password hasher and the notifier, builds every service
with a reference back to itself, and is stored on ``app.extensions``.
"""
from .users import UserService
from .sessions import SessionService
from .tokens import TokenLedger, VerificationLedger, PasswordResetLedger
from .polls import PollService, PollOptionService
from .votes import VoteService
from .pruning import PruningScheduler
from ..extensions import db
from ..store import RecordStore
from ..utils.mailer import MailNotifier
from ..utils.security import PasswordHasher

EXTENSION_KEY = "greenpoll.services"


class Services:
    def __init__(self, store, hasher, config, notifier=None, app=None):
        self.store = store
        self.hasher = hasher
        self.config = config
        self.notifier = notifier

        self.users = UserService(self)
        self.sessions = SessionService(self)
        self.verifications = VerificationLedger(self, config["VERIFY_TTL_SECONDS"])
        self.password_resets = PasswordResetLedger(self, config["PASSWORD_RESET_TTL_SECONDS"])
        self.polls = PollService(self)
        self.poll_options = PollOptionService(self)
        self.votes = VoteService(self)

        self.scheduler = PruningScheduler(self, app=app, interval=config["PRUNE_INTERVAL_SECONDS"])

    @classmethod
    def init_app(cls, app):
        services = cls(
            store=RecordStore(db),
            hasher=PasswordHasher(app.config["PASSWORD_HASH_METHOD"]),
            config=app.config,
            notifier=MailNotifier(),
            app=app,
        )
        app.extensions[EXTENSION_KEY] = services
        return services


__all__ = [
    "Services",
    "UserService",
    "SessionService",
    "TokenLedger",
    "VerificationLedger",
    "PasswordResetLedger",
    "PollService",
    "PollOptionService",
    "VoteService",
    "PruningScheduler",
    "EXTENSION_KEY",
]
