from sqlalchemy import exists

from . import operation
from ..models import User, Poll, PollVote, Verification


@operation("user.create", write=True)
def create_user(session, username, email, password_hash):
    user = User(username=username, email=email, password_hash=password_hash)
    session.add(user)
    return [user]


@operation("user.get")
def get_user(session, user_id):
    return session.query(User).filter_by(id=user_id).all()


@operation("user.get_by_username")
def get_user_by_username(session, username):
    return session.query(User).filter_by(username=username).all()


@operation("user.get_by_email")
def get_user_by_email(session, email):
    return session.query(User).filter_by(email=email).all()


@operation("user.set_username", write=True)
def set_username(session, user_id, username):
    session.query(User).filter_by(id=user_id).update({"username": username}, synchronize_session="fetch")


@operation("user.set_email", write=True)
def set_email(session, user_id, email):
    session.query(User).filter_by(id=user_id).update({"email": email}, synchronize_session="fetch")


@operation("user.set_password", write=True)
def set_password(session, user_id, password_hash):
    session.query(User).filter_by(id=user_id).update(
        {"password_hash": password_hash}, synchronize_session="fetch"
    )


@operation("user.set_verified", write=True)
def set_verified(session, user_id, verified):
    session.query(User).filter_by(id=user_id).update({"verified": verified}, synchronize_session="fetch")


@operation("user.delete", write=True)
def delete_user(session, user_id):
    session.query(User).filter_by(id=user_id).delete(synchronize_session="fetch")


@operation("user.get_polls")
def get_user_polls(session, user_id):
    return session.query(Poll).filter_by(user_id=user_id).order_by(Poll.create_time.desc(), Poll.id.desc()).all()


@operation("user.get_vote_polls")
def get_user_vote_polls(session, user_id):
    return (
        session.query(Poll)
        .join(PollVote, PollVote.poll_id == Poll.id)
        .filter(PollVote.user_id == user_id)
        .order_by(PollVote.vote_time.desc(), PollVote.id.desc())
        .all()
    )


@operation("user.prune_unverified", write=True)
def prune_unverified_users(session, joined_before):
    """Unverified users whose verification window closed without a live token."""
    has_token = exists().where(Verification.email == User.email)
    ids = [
        row.id
        for row in session.query(User.id).filter(
            User.verified.is_(False),
            User.join_time <= joined_before,
            ~has_token,
        )
    ]
    if ids:
        session.query(User).filter(User.id.in_(ids)).delete(synchronize_session="fetch")
    return ids
