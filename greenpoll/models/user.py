from ..extensions import db
from ..utils import clock


class User(db.Model):
    __tablename__ = "users"

    USERNAME_MIN, USERNAME_MAX = 3, 63
    EMAIL_MIN, EMAIL_MAX = 5, 63
    PASSWORD_MIN, PASSWORD_MAX = 8, 255

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(USERNAME_MAX), nullable=False, unique=True, index=True)
    email = db.Column(db.String(EMAIL_MAX), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    verified = db.Column(db.Boolean, nullable=False, default=False)
    join_time = db.Column(db.DateTime, nullable=False, default=lambda: clock.utcnow(), index=True)

    def __repr__(self):
        return f"<User {self.id} {self.username!r}>"
