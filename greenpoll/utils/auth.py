from functools import wraps

from flask import current_app, g, request

from ..errors import InvalidCredentials, NotFound, PermissionDenied
from ..services import EXTENSION_KEY


def get_services():
    return current_app.extensions[EXTENSION_KEY]


def get_session_id():
    return request.cookies.get(current_app.config["SESSION_ID_COOKIE"])


def set_session_cookie(response, session_id: str):
    response.set_cookie(
        current_app.config["SESSION_ID_COOKIE"],
        session_id,
        httponly=True,
        secure=current_app.config["SESSION_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


def clear_session_cookie(response):
    response.delete_cookie(current_app.config["SESSION_ID_COOKIE"])
    return response


def login_required(fn):
    """
    Resolve the session cookie to ``g.current_user`` or fail with 401.
    A stale or evicted session reads the same as no session at all.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        session_id = get_session_id()
        if not session_id:
            raise InvalidCredentials("Not logged in")
        try:
            g.current_user = get_services().sessions.get_user_by_session_id(session_id)
        except NotFound:
            raise InvalidCredentials("Not logged in") from None
        return fn(*args, **kwargs)
    return wrapper


def assert_poll_owner(poll) -> None:
    if not poll.is_owned_by(g.current_user.id):
        raise PermissionDenied("You do not own this poll")
