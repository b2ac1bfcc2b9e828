"""
Operations for the email-keyed token families. Both tables have the same
shape, so one set of operations is registered per family prefix.

Every read takes a ``live_after`` cutoff: rows created at or before it are
expired and treated as absent even if they have not been pruned yet.
"""
from . import operation
from ..models import Verification, PasswordReset, User


def register_token_operations(prefix, model):
    @operation(f"{prefix}.create", write=True)
    def create(session, token_id, email, create_time):
        token = model(id=token_id, email=email, create_time=create_time)
        session.add(token)
        return [token]

    @operation(f"{prefix}.get")
    def get(session, token_id, live_after):
        return session.query(model).filter(model.id == token_id, model.create_time > live_after).all()

    @operation(f"{prefix}.get_by_email")
    def get_by_email(session, email, live_after):
        return session.query(model).filter(model.email == email, model.create_time > live_after).all()

    @operation(f"{prefix}.get_all")
    def get_all(session, live_after):
        return session.query(model).filter(model.create_time > live_after).order_by(model.create_time).all()

    @operation(f"{prefix}.get_user")
    def get_user(session, token_id, live_after):
        return (
            session.query(User)
            .join(model, model.email == User.email)
            .filter(model.id == token_id, model.create_time > live_after)
            .all()
        )

    @operation(f"{prefix}.delete", write=True)
    def delete(session, token_id):
        return [session.query(model).filter_by(id=token_id).delete(synchronize_session="fetch")]

    @operation(f"{prefix}.delete_expired_for_email", write=True)
    def delete_expired_for_email(session, email, live_after):
        session.query(model).filter(model.email == email, model.create_time <= live_after).delete(
            synchronize_session="fetch"
        )

    @operation(f"{prefix}.prune", write=True)
    def prune(session, live_after):
        ids = [row.id for row in session.query(model.id).filter(model.create_time <= live_after)]
        if ids:
            session.query(model).filter(model.id.in_(ids)).delete(synchronize_session="fetch")
        return ids


register_token_operations("verification", Verification)
register_token_operations("password_reset", PasswordReset)
