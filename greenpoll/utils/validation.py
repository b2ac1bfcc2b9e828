from flask import abort, request
from marshmallow import ValidationError as SchemaError


def validate_or_abort(schema, payload=None):
    """Load ``payload`` (default: the JSON body) or abort with a 400 listing field errors."""
    if payload is None:
        payload = request.get_json(silent=True) or {}
    try:
        return schema.load(payload)
    except SchemaError as err:
        abort(
            400,
            description={
                "code": "VALIDATION_ERROR",
                "message": "Validation error",
                "errors": err.messages,
            },
        )
