from marshmallow import fields

from ..extensions import ma


class PollCreateSchema(ma.Schema):
    title = fields.Str(required=True)
    description = fields.Str(load_default="")
    options = fields.List(fields.Str(), load_default=list)


class TitleSchema(ma.Schema):
    title = fields.Str(required=True)


class DescriptionSchema(ma.Schema):
    description = fields.Str(required=True)


class OptionValueSchema(ma.Schema):
    value = fields.Str(required=True)


class OptionReadSchema(ma.Schema):
    id = fields.Int()
    poll_id = fields.Int()
    value = fields.Str()


class PollReadSchema(ma.Schema):
    id = fields.Int()
    user_id = fields.Int()
    title = fields.Str()
    description = fields.Str()
    create_time = fields.DateTime()


class PollVoterSchema(ma.Schema):
    user_id = fields.Int()
    username = fields.Str()
    poll_option_id = fields.Int()
    poll_option_value = fields.Str()
    vote_time = fields.DateTime()
