from . import operation
from ..models import Session, User


@operation("session.create", write=True)
def create_session(session, session_id, user_id, create_time):
    record = Session(id=session_id, user_id=user_id, create_time=create_time)
    session.add(record)
    return [record]


@operation("session.get")
def get_session(session, session_id):
    return session.query(Session).filter_by(id=session_id).all()


@operation("session.get_user")
def get_user_by_session_id(session, session_id):
    return session.query(User).join(Session, Session.user_id == User.id).filter(Session.id == session_id).all()


@operation("session.get_user_sessions")
def get_user_sessions(session, user_id):
    return (
        session.query(Session)
        .filter_by(user_id=user_id)
        .order_by(Session.create_time.desc(), Session.id.desc())
        .all()
    )


@operation("session.delete", write=True)
def delete_session(session, session_id):
    session.query(Session).filter_by(id=session_id).delete(synchronize_session="fetch")


@operation("session.delete_user_sessions", write=True)
def delete_user_sessions(session, user_id):
    session.query(Session).filter_by(user_id=user_id).delete(synchronize_session="fetch")


@operation("session.delete_old_user_sessions", write=True)
def delete_old_user_sessions(session, user_id, keep, keep_id):
    """Keep ``keep_id`` plus the newest ``keep - 1`` other sessions of a user."""
    stale = [
        row.id
        for row in session.query(Session.id)
        .filter(Session.user_id == user_id, Session.id != keep_id)
        .order_by(Session.create_time.desc(), Session.id.desc())
        .offset(max(keep - 1, 0))
    ]
    if stale:
        session.query(Session).filter(Session.id.in_(stale)).delete(synchronize_session="fetch")
    return stale
