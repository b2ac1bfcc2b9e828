from sqlalchemy.orm import declared_attr

from ..extensions import db
from ..utils import clock


class _EmailToken:
    """Columns shared by the short-lived, single-use tokens keyed by email."""

    id = db.Column(db.String(64), primary_key=True)
    create_time = db.Column(db.DateTime, nullable=False, default=lambda: clock.utcnow(), index=True)

    @declared_attr
    def email(cls):
        # One live token per email; follows the user's email on change
        return db.Column(
            db.String(63),
            db.ForeignKey("users.email", onupdate="CASCADE", ondelete="CASCADE"),
            nullable=False,
            unique=True,
            index=True,
        )


class Verification(_EmailToken, db.Model):
    __tablename__ = "verifications"


class PasswordReset(_EmailToken, db.Model):
    __tablename__ = "password_resets"
