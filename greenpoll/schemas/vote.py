from marshmallow import fields

from ..extensions import ma


class VoteSubmitSchema(ma.Schema):
    poll_option_id = fields.Int(required=True, strict=True)


class VoteReadSchema(ma.Schema):
    id = fields.Int()
    user_id = fields.Int()
    poll_id = fields.Int()
    poll_option_id = fields.Int()
    vote_time = fields.DateTime()
