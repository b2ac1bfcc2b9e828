from flask import Blueprint, g
from flasgger import swag_from

from ...schemas.poll import PollReadSchema
from ...schemas.vote import VoteSubmitSchema, VoteReadSchema
from ...utils.auth import get_services, login_required
from ...utils.validation import validate_or_abort

voting_bp = Blueprint("voting", __name__)

vote_submit_schema = VoteSubmitSchema()
vote_read_schema = VoteReadSchema()
poll_read_schema = PollReadSchema()


@voting_bp.post("/")
@login_required
@swag_from({
    "tags": ["Voting"],
    "summary": "Vote for an option, replacing any earlier vote on the same poll",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {"poll_option_id": {"type": "integer", "example": 1}},
            "required": ["poll_option_id"],
        },
    }],
    "responses": {
        201: {"description": "Vote recorded"},
        400: {"description": "Validation error"},
        401: {"description": "Not logged in"},
        404: {"description": "Option not found"},
    },
})
def vote():
    payload = validate_or_abort(vote_submit_schema)
    poll_vote = get_services().votes.vote(g.current_user.id, payload["poll_option_id"])
    return {"message": "Vote recorded", "vote": vote_read_schema.dump(poll_vote)}, 201


@voting_bp.delete("/<int:poll_id>")
@login_required
@swag_from({"tags": ["Voting"], "summary": "Withdraw the current user's vote", "responses": {200: {}, 401: {}}})
def unvote(poll_id):
    get_services().votes.unvote(g.current_user.id, poll_id)
    return {"message": "Vote removed"}, 200


@voting_bp.get("/<int:poll_id>")
@login_required
@swag_from({"tags": ["Voting"], "summary": "Get the current user's vote on a poll", "responses": {200: {}, 401: {}, 404: {}}})
def get_user_vote(poll_id):
    poll_vote = get_services().votes.get_poll_vote(g.current_user.id, poll_id)
    return {"vote": vote_read_schema.dump(poll_vote)}, 200


@voting_bp.get("/by_id/<int:poll_vote_id>/poll")
@swag_from({"tags": ["Voting"], "summary": "Get the poll a vote was cast on", "responses": {200: {}, 404: {}}})
def get_poll_vote_poll(poll_vote_id):
    poll = get_services().votes.get_poll_vote_poll(poll_vote_id)
    return {"poll": poll_read_schema.dump(poll)}, 200
