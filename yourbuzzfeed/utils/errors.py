"""
Error taxonomy shared by the storage layer, services and routes.

Every failure that reaches a client goes through error_response(), which turns it
into a generic ``{"message": ...}`` JSON body and a status code.
"""
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    STATUS = 500
    MESSAGE = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.MESSAGE
        super().__init__(self.message)

    def to_dict(self):
        return {'message': self.message}


class ValidationError(AppError):
    STATUS = 400
    MESSAGE = "Invalid request"

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = list(errors or [])

    def to_dict(self):
        data = super().to_dict()
        if self.errors:
            data['errors'] = self.errors
        return data


class NotFoundError(AppError):
    STATUS = 404
    MESSAGE = "Not found"


class UnauthorizedError(AppError):
    STATUS = 401
    MESSAGE = "Unauthorized"


class UpstreamError(AppError):
    """A third-party provider (LLM, image search, news source) failed.

    The client only ever sees the generic message; the cause is logged where it is raised.
    """
    STATUS = 500
    MESSAGE = "Upstream service error"


class InternalError(AppError):
    STATUS = 500
    MESSAGE = "Internal server error"


HTTP_MESSAGES = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    405: "Method not allowed",
    413: "Request entity too large",
    415: "Unsupported media type",
    429: "Too many requests",
}


def error_response(exc):
    """Map any exception to ``(body, status)``."""
    if isinstance(exc, AppError):
        return exc.to_dict(), exc.STATUS
    if isinstance(exc, HTTPException):
        code = exc.code or 500
        return {'message': HTTP_MESSAGES.get(code, InternalError.MESSAGE)}, code
    return {'message': InternalError.MESSAGE}, InternalError.STATUS
