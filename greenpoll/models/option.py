from ..extensions import db


class PollOption(db.Model):
    __tablename__ = "poll_options"

    VALUE_MIN, VALUE_MAX = 1, 255
    MAX_PER_POLL = 5

    id = db.Column(db.Integer, primary_key=True)
    poll_id = db.Column(db.Integer, db.ForeignKey("polls.id", ondelete="CASCADE"), nullable=False, index=True)

    value = db.Column(db.String(VALUE_MAX), nullable=False)

    # Each option occupies one of MAX_PER_POLL slots; the store enforces the cap
    slot = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("poll_id", "slot", name="uq_poll_options_poll_slot"),
        db.CheckConstraint(f"slot >= 0 AND slot < {MAX_PER_POLL}", name="ck_poll_options_slot_range"),
    )
