def swagger_template(app=None):
    title = "GreenPoll API"
    version = "1.0.0"
    cookie_name = "sessionID"

    if app:
        title = app.config.get("SWAGGER_TITLE", title)
        version = app.config.get("SWAGGER_VERSION", version)
        cookie_name = app.config.get("SESSION_ID_COOKIE", cookie_name)

    return {
        "swagger": "2.0",
        "info": {"title": title, "version": version},
        "securityDefinitions": {
            "SessionCookie": {
                "type": "apiKey",
                "name": cookie_name,
                "in": "cookie",
                "description": "Opaque session id set by /api/auth/login"
            }
        },
        "definitions": {
            "ErrorResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": False},
                    "error": {
                        "type": "object",
                        "properties": {
                            "code": {
                                "type": "string",
                                "enum": [
                                    "VALIDATION_ERROR",
                                    "NOT_FOUND",
                                    "INVALID_CREDENTIALS",
                                    "INVALID_TOKEN",
                                    "PERMISSION_DENIED",
                                    "STORE_ERROR",
                                ],
                            },
                            "message": {"type": "string", "example": "Title must be between 1 and 255 characters"},
                            "field": {"type": "string", "example": "title"},
                            "details": {"type": "object"}
                        }
                    },
                    "request_id": {"type": "string"}
                }
            }
        }
    }
