from marshmallow import fields

from ..extensions import ma


class UserSchema(ma.Schema):
    id = fields.Int()
    username = fields.Str()
    email = fields.Email()
    verified = fields.Bool()
    join_time = fields.DateTime()


class PublicUserSchema(ma.Schema):
    id = fields.Int()
    username = fields.Str()
    join_time = fields.DateTime()


class UsernameSchema(ma.Schema):
    username = fields.Str(required=True)


class PasswordSchema(ma.Schema):
    password = fields.Str(required=True)
