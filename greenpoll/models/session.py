from ..extensions import db
from ..utils import clock


class Session(db.Model):
    """A login session; the id doubles as the bearer credential."""

    __tablename__ = "user_sessions"

    id = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    create_time = db.Column(db.DateTime, nullable=False, default=lambda: clock.utcnow())

    __table_args__ = (
        db.Index("ix_user_sessions_user_id_create_time", "user_id", "create_time"),
    )
