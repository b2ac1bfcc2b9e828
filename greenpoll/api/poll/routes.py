from flask import Blueprint, g
from flasgger import swag_from

from ...schemas.poll import (
    PollCreateSchema,
    TitleSchema,
    DescriptionSchema,
    OptionValueSchema,
    OptionReadSchema,
    PollReadSchema,
    PollVoterSchema,
)
from ...schemas.vote import VoteReadSchema
from ...utils.auth import assert_poll_owner, get_services, login_required
from ...utils.validation import validate_or_abort

polls_bp = Blueprint("polls", __name__)
options_bp = Blueprint("options", __name__)

poll_create_schema = PollCreateSchema()
title_schema = TitleSchema()
description_schema = DescriptionSchema()
option_value_schema = OptionValueSchema()
poll_read_schema = PollReadSchema()
option_read_schema = OptionReadSchema()
option_read_many_schema = OptionReadSchema(many=True)
vote_read_many_schema = VoteReadSchema(many=True)
voter_many_schema = PollVoterSchema(many=True)


def _poll_payload(poll):
    options = get_services().polls.get_poll_options(poll.id)
    return {**poll_read_schema.dump(poll), "options": option_read_many_schema.dump(options)}


@polls_bp.post("/")
@login_required
@swag_from({
    "tags": ["Polls"],
    "summary": "Create a poll, optionally with up to five options",
    "responses": {201: {"description": "Created"}, 400: {"description": "Validation error"}, 401: {}}
})
def create_poll():
    payload = validate_or_abort(poll_create_schema)
    services = get_services()

    # Poll and its initial options land together or not at all
    with services.store.atomic():
        poll = services.polls.create_poll(g.current_user.id, payload["title"], payload["description"])
        for value in payload["options"]:
            services.poll_options.create_poll_option(poll.id, value)

    return {"poll": _poll_payload(poll)}, 201


@polls_bp.get("/<int:poll_id>")
@swag_from({"tags": ["Polls"], "summary": "Get poll details", "responses": {200: {}, 404: {}}})
def get_poll(poll_id):
    poll = get_services().polls.get_poll(poll_id)
    return {"poll": _poll_payload(poll)}, 200


@polls_bp.get("/<int:poll_id>/options")
@swag_from({"tags": ["Polls"], "summary": "List poll options", "responses": {200: {}}})
def get_poll_options(poll_id):
    options = get_services().polls.get_poll_options(poll_id)
    return {"options": option_read_many_schema.dump(options)}, 200


@polls_bp.get("/<int:poll_id>/votes")
@swag_from({"tags": ["Polls"], "summary": "List poll votes", "responses": {200: {}}})
def get_poll_votes(poll_id):
    votes = get_services().polls.get_poll_votes(poll_id)
    return {"votes": vote_read_many_schema.dump(votes)}, 200


@polls_bp.get("/<int:poll_id>/voters")
@swag_from({"tags": ["Polls"], "summary": "List voters with their chosen option", "responses": {200: {}}})
def get_poll_voters(poll_id):
    voters = get_services().polls.get_poll_voters(poll_id)
    return {"voters": voter_many_schema.dump(voters)}, 200


@polls_bp.put("/<int:poll_id>/title")
@login_required
@swag_from({"tags": ["Polls"], "summary": "Set poll title (owner)", "responses": {200: {}, 400: {}, 403: {}, 404: {}}})
def set_poll_title(poll_id):
    services = get_services()
    poll = services.polls.get_poll(poll_id)
    assert_poll_owner(poll)

    payload = validate_or_abort(title_schema)
    services.polls.set_title(poll_id, payload["title"])
    return {"poll": _poll_payload(services.polls.get_poll(poll_id))}, 200


@polls_bp.put("/<int:poll_id>/description")
@login_required
@swag_from({"tags": ["Polls"], "summary": "Set poll description (owner)", "responses": {200: {}, 400: {}, 403: {}, 404: {}}})
def set_poll_description(poll_id):
    services = get_services()
    poll = services.polls.get_poll(poll_id)
    assert_poll_owner(poll)

    payload = validate_or_abort(description_schema)
    services.polls.set_description(poll_id, payload["description"])
    return {"poll": _poll_payload(services.polls.get_poll(poll_id))}, 200


@polls_bp.delete("/<int:poll_id>")
@login_required
@swag_from({"tags": ["Polls"], "summary": "Delete poll (owner)", "responses": {200: {}, 403: {}, 404: {}}})
def delete_poll(poll_id):
    services = get_services()
    poll = services.polls.get_poll(poll_id)
    assert_poll_owner(poll)

    services.polls.delete_poll(poll_id)
    return {"message": "Poll deleted successfully"}, 200


@polls_bp.post("/<int:poll_id>/options")
@login_required
@swag_from({"tags": ["Options"], "summary": "Add an option (owner, max five)", "responses": {201: {}, 400: {}, 403: {}, 404: {}}})
def create_poll_option(poll_id):
    services = get_services()
    poll = services.polls.get_poll(poll_id)
    assert_poll_owner(poll)

    payload = validate_or_abort(option_value_schema)
    option = services.poll_options.create_poll_option(poll_id, payload["value"])
    return {"option": option_read_schema.dump(option)}, 201


@options_bp.get("/<int:option_id>")
@swag_from({"tags": ["Options"], "summary": "Get an option", "responses": {200: {}, 404: {}}})
def get_poll_option(option_id):
    option = get_services().poll_options.get_poll_option(option_id)
    return {"option": option_read_schema.dump(option)}, 200


@options_bp.get("/<int:option_id>/poll")
@swag_from({"tags": ["Options"], "summary": "Get the poll an option belongs to", "responses": {200: {}, 404: {}}})
def get_poll_option_poll(option_id):
    poll = get_services().poll_options.get_poll_option_poll(option_id)
    return {"poll": poll_read_schema.dump(poll)}, 200


@options_bp.put("/<int:option_id>")
@login_required
@swag_from({"tags": ["Options"], "summary": "Change option text (owner)", "responses": {200: {}, 400: {}, 403: {}, 404: {}}})
def set_poll_option_value(option_id):
    services = get_services()
    poll = services.poll_options.get_poll_option_poll(option_id)
    assert_poll_owner(poll)

    payload = validate_or_abort(option_value_schema)
    services.poll_options.set_poll_option_value(option_id, payload["value"])
    return {"option": option_read_schema.dump(services.poll_options.get_poll_option(option_id))}, 200


@options_bp.delete("/<int:option_id>")
@login_required
@swag_from({"tags": ["Options"], "summary": "Delete an option (owner)", "responses": {200: {}, 403: {}, 404: {}}})
def delete_poll_option(option_id):
    services = get_services()
    poll = services.poll_options.get_poll_option_poll(option_id)
    assert_poll_owner(poll)

    services.poll_options.delete_poll_option(option_id)
    return {"message": "Option deleted successfully"}, 200
