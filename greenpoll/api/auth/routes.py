from flask import Blueprint, current_app, g, jsonify, request
from flasgger import swag_from

from ...errors import NotFound
from ...schemas.auth import (
    RegisterSchema,
    LoginSchema,
    EmailSchema,
    VerifySchema,
    ResetPasswordSchema,
)
from ...schemas.user import UserSchema
from ...utils.auth import (
    clear_session_cookie,
    get_services,
    get_session_id,
    login_required,
    set_session_cookie,
)
from ...utils.validation import validate_or_abort

auth_bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
email_schema = EmailSchema()
verify_schema = VerifySchema()
reset_password_schema = ResetPasswordSchema()
user_schema = UserSchema()


def _ttl_minutes(ledger) -> int:
    return int(ledger.ttl.total_seconds() // 60)


def _send_verification(user, token):
    services = get_services()
    services.notifier.send(
        user.email,
        "GreenPoll - Verify Account",
        "verify",
        {
            "username": user.username,
            "url": current_app.config["APP_URL"],
            "verify_id": token.id,
            "ttl_minutes": _ttl_minutes(services.verifications),
        },
    )


@auth_bp.post("/register")
@swag_from({
    "tags": ["Auth"],
    "summary": "Register a user",
    "description": "Creates an unverified account and emails a verification link.",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "username": {"type": "string", "example": "greenfan"},
                "email": {"type": "string", "example": "fan@example.com"},
                "password": {"type": "string", "example": "StrongPass123"},
            },
            "required": ["username", "email", "password"]
        }
    }],
    "responses": {
        "201": {"description": "User created"},
        "400": {"description": "Validation error (taken or out-of-range field)"},
    }
})
def register():
    payload = validate_or_abort(register_schema)
    services = get_services()

    with services.store.atomic():
        user = services.users.create_user(payload["username"], payload["email"], payload["password"])
        token = services.verifications.create(user.email)

    _send_verification(user, token)
    return {"message": "User registered successfully", "user": user_schema.dump(user)}, 201


@auth_bp.post("/login")
@swag_from({
    "tags": ["Auth"],
    "summary": "Login with email and password",
    "description": "Opens a session and sets the session cookie. At most four sessions live per user.",
    "responses": {
        200: {"description": "Login successful, session cookie set"},
        400: {"description": "Validation error"},
        401: {"description": "Invalid credentials"},
    }
})
def login():
    payload = validate_or_abort(login_schema)
    services = get_services()

    session = services.users.login(payload["email"], payload["password"])
    user = services.users.get_user(session.user_id)

    current_app.logger.info("Login succeeded user_id=%s", user.id)
    response = jsonify({"message": "Login successful", "user": user_schema.dump(user)})
    return set_session_cookie(response, session.id)


@auth_bp.post("/logout")
@swag_from({"tags": ["Auth"], "summary": "Logout (end the current session)", "responses": {200: {}}})
def logout():
    session_id = get_session_id()
    if session_id:
        get_services().sessions.delete_session(session_id)

    return clear_session_cookie(jsonify({"message": "Logged out successfully"}))


@auth_bp.post("/logout_everywhere")
@login_required
@swag_from({"tags": ["Auth"], "summary": "End every session of the current user", "responses": {200: {}, 401: {}}})
def logout_everywhere():
    get_services().sessions.delete_user_sessions(g.current_user.id)
    return clear_session_cookie(jsonify({"message": "Logged out everywhere"}))


@auth_bp.post("/verify_account")
@swag_from({"tags": ["Auth"], "summary": "Redeem a verification token", "responses": {200: {}, 400: {}}})
def verify_account():
    payload = validate_or_abort(verify_schema)
    get_services().verifications.redeem(payload["verify_id"])
    return {"message": "Account verified"}, 200


@auth_bp.post("/resend_verification")
@swag_from({
    "tags": ["Auth"],
    "summary": "Re-send the verification email",
    "description": "Returns the same response whether or not the address is registered.",
    "responses": {200: {}},
})
def resend_verification():
    payload = validate_or_abort(email_schema)
    services = get_services()

    try:
        user = services.users.get_user_by_email(payload["email"])
    except NotFound:
        user = None

    if user is not None and not user.verified:
        token = services.verifications.create(user.email)
        _send_verification(user, token)

    return {"message": "If the account exists and is unverified, a verification email has been sent"}, 200


@auth_bp.post("/request_password_reset")
@swag_from({
    "tags": ["Auth"],
    "summary": "Request a password reset email",
    "description": "Returns the same response whether or not the address is registered.",
    "responses": {200: {}},
})
def request_password_reset():
    payload = validate_or_abort(email_schema)
    services = get_services()

    try:
        user = services.users.get_user_by_email(payload["email"])
    except NotFound:
        user = None

    if user is not None:
        token = services.password_resets.create(user.email)
        services.notifier.send(
            user.email,
            "GreenPoll - Password Reset",
            "password_reset",
            {
                "username": user.username,
                "url": current_app.config["APP_URL"],
                "reset_id": token.id,
                "ttl_minutes": _ttl_minutes(services.password_resets),
            },
        )

    return {"message": "If the account exists, a password reset email has been sent"}, 200


@auth_bp.get("/password_reset_exists")
@swag_from({
    "tags": ["Auth"],
    "summary": "Check whether a password reset token is still live",
    "parameters": [{"in": "query", "name": "reset_id", "required": True, "type": "string"}],
    "responses": {200: {}},
})
def password_reset_exists():
    reset_id = request.args.get("reset_id", "")
    return {"exists": get_services().password_resets.exists(reset_id)}, 200


@auth_bp.post("/reset_password")
@swag_from({"tags": ["Auth"], "summary": "Redeem a password reset token", "responses": {200: {}, 400: {}}})
def reset_password():
    payload = validate_or_abort(reset_password_schema)
    get_services().password_resets.redeem(payload["reset_id"], new_password=payload["new_password"])
    return {"message": "Password reset successfully"}, 200
