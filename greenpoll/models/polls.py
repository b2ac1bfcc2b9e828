from ..extensions import db
from ..utils import clock


class Poll(db.Model):
    __tablename__ = "polls"

    TITLE_MIN, TITLE_MAX = 1, 255
    DESCRIPTION_MAX = 1023

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = db.Column(db.String(TITLE_MAX), nullable=False)
    description = db.Column(db.String(DESCRIPTION_MAX), nullable=False, default="")

    create_time = db.Column(db.DateTime, nullable=False, default=lambda: clock.utcnow())

    def is_owned_by(self, user_id) -> bool:
        return self.user_id == user_id
