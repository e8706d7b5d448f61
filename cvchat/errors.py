"""Error taxonomy and the JSON error handlers wired into the app."""

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from cvchat.utils.logger import get_logger

logger = get_logger(__name__)


class CVChatError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None, detail=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        # internal detail for logs, never sent to the caller
        self.detail = detail


class ValidationError(CVChatError):
    status_code = 400
    message = "Invalid request"


class UnreadableDocument(ValidationError):
    message = "CV PDF contains no readable text (scanned PDFs not supported)"


class PayloadTooLarge(ValidationError):
    status_code = 413
    message = "Upload too large (max 50MB)"


class Unauthorized(CVChatError):
    status_code = 401
    message = "Unauthorized"


class AccessDenied(CVChatError):
    status_code = 403
    message = "Forbidden"


class NotFound(CVChatError):
    status_code = 404
    message = "Not found"


class Conflict(CVChatError):
    status_code = 409
    message = "Conflict"


class RateLimited(CVChatError):
    status_code = 429
    message = "Too many requests"

    def __init__(self, retry_after, message=None):
        super().__init__(message)
        self.retry_after = retry_after


class DependencyFailure(CVChatError):
    """The completion endpoint was unreachable, timed out, or answered non-2xx/empty."""
    status_code = 502
    message = "AI request failed"


class ParsingUnavailable(DependencyFailure):
    message = "AI parsing failed"


class MalformedModelOutput(CVChatError):
    """The completion succeeded but its body is not the JSON object we asked for."""
    status_code = 500
    message = "AI parsing failed"


def register_error_handlers(app):
    @app.errorhandler(CVChatError)
    def handle_cvchat_error(error):
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.detail or error.message)
        response = jsonify({"error": error.message})
        response.status_code = error.status_code
        if isinstance(error, RateLimited):
            response.headers["Retry-After"] = str(error.retry_after)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        message = error.description
        if error.code == 413:
            message = PayloadTooLarge.message
        return jsonify({"error": message}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        from cvchat.extensions import db
        from cvchat.services.observability import capture_server_error

        db.session.rollback()
        capture_server_error(request.path, error)
        return jsonify({"error": "Internal server error"}), 500
