from ..extensions import db
from ..utils import clock


class PollVote(db.Model):
    __tablename__ = "poll_votes"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    poll_id = db.Column(db.Integer, db.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)
    poll_option_id = db.Column(
        db.Integer, db.ForeignKey("poll_options.id", ondelete="CASCADE"), nullable=False, index=True
    )

    vote_time = db.Column(db.DateTime, nullable=False, default=lambda: clock.utcnow())

    __table_args__ = (
        # One vote per user per poll
        db.UniqueConstraint("user_id", "poll_id", name="uq_poll_votes_user_poll"),
    )
