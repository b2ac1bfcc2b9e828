from marshmallow import fields

from ..extensions import ma

# Length rules live in the services so every caller gets the same errors;
# these schemas only check shape.


class RegisterSchema(ma.Schema):
    username = fields.Str(required=True)
    email = fields.Str(required=True)
    password = fields.Str(required=True)


class LoginSchema(ma.Schema):
    """Schema for login request"""
    email = fields.Str(required=True)
    password = fields.Str(required=True)


class EmailSchema(ma.Schema):
    email = fields.Str(required=True)


class VerifySchema(ma.Schema):
    verify_id = fields.Str(required=True)


class ResetPasswordSchema(ma.Schema):
    reset_id = fields.Str(required=True)
    new_password = fields.Str(required=True)
