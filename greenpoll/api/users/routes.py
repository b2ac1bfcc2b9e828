from flask import Blueprint, g, jsonify
from flasgger import swag_from

from ...schemas.auth import EmailSchema
from ...schemas.poll import PollReadSchema
from ...schemas.user import UserSchema, PublicUserSchema, UsernameSchema, PasswordSchema
from ...utils.auth import clear_session_cookie, get_services, login_required
from ...utils.validation import validate_or_abort

users_bp = Blueprint("users", __name__)

user_schema = UserSchema()
public_user_schema = PublicUserSchema()
username_schema = UsernameSchema()
email_schema = EmailSchema()
password_schema = PasswordSchema()
poll_read_many_schema = PollReadSchema(many=True)


@users_bp.get("/me")
@login_required
@swag_from({"tags": ["Users"], "summary": "Get current user profile", "responses": {200: {}, 401: {}}})
def me():
    return {"user": user_schema.dump(g.current_user)}, 200


@users_bp.get("/<int:user_id>")
@swag_from({"tags": ["Users"], "summary": "Get a user's public profile", "responses": {200: {}, 404: {}}})
def get_user(user_id):
    user = get_services().users.get_user(user_id)
    return {"user": public_user_schema.dump(user)}, 200


@users_bp.put("/me/username")
@login_required
@swag_from({"tags": ["Users"], "summary": "Change username", "responses": {200: {}, 400: {}, 401: {}}})
def set_username():
    payload = validate_or_abort(username_schema)
    services = get_services()

    services.users.set_username(g.current_user.id, payload["username"])
    return {"user": user_schema.dump(services.users.get_user(g.current_user.id))}, 200


@users_bp.put("/me/email")
@login_required
@swag_from({"tags": ["Users"], "summary": "Change email address", "responses": {200: {}, 400: {}, 401: {}}})
def set_email():
    payload = validate_or_abort(email_schema)
    services = get_services()

    services.users.set_email(g.current_user.id, payload["email"])
    return {"user": user_schema.dump(services.users.get_user(g.current_user.id))}, 200


@users_bp.put("/me/password")
@login_required
@swag_from({"tags": ["Users"], "summary": "Change password", "responses": {200: {}, 400: {}, 401: {}}})
def set_password():
    payload = validate_or_abort(password_schema)
    get_services().users.set_password(g.current_user.id, payload["password"])
    return {"message": "Password updated"}, 200


@users_bp.get("/me/polls")
@login_required
@swag_from({"tags": ["Users"], "summary": "Polls created by the current user", "responses": {200: {}, 401: {}}})
def my_polls():
    polls = get_services().users.get_user_polls(g.current_user.id)
    return {"polls": poll_read_many_schema.dump(polls)}, 200


@users_bp.get("/me/vote_polls")
@login_required
@swag_from({"tags": ["Users"], "summary": "Polls the current user voted on", "responses": {200: {}, 401: {}}})
def my_vote_polls():
    polls = get_services().users.get_user_vote_polls(g.current_user.id)
    return {"polls": poll_read_many_schema.dump(polls)}, 200


@users_bp.delete("/me")
@login_required
@swag_from({"tags": ["Users"], "summary": "Delete the current account", "responses": {200: {}, 401: {}}})
def delete_me():
    get_services().users.delete_user(g.current_user.id)
    return clear_session_cookie(jsonify({"message": "Account deleted"}))
