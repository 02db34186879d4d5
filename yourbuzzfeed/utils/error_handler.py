"""
Site-wide error handling.

Registers one handler per error family on the app; all of them render through
errors.error_response so clients get the same ``{"message": ...}`` shape everywhere.
"""
from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException

from .errors import AppError, error_response


class ErrorHandler:
    """Error handler registry"""

    @staticmethod
    def register_handlers(app):
        """Register all error handlers"""

        @app.errorhandler(AppError)
        def handle_app_error(e):
            body, status = error_response(e)
            if status >= 500:
                current_app.logger.error(f"{request.method} {request.path} failed: {e.message}")
            else:
                current_app.logger.info(f"{request.method} {request.path} -> {status}: {e.message}")
            return jsonify(body), status

        @app.errorhandler(HTTPException)
        def handle_http_error(e):
            body, status = error_response(e)
            return jsonify(body), status

        @app.errorhandler(Exception)
        def handle_unexpected_error(e):
            # Full traceback stays in the server log
            current_app.logger.error(f"Unhandled error on {request.method} {request.path}: {e}", exc_info=True)
            body, status = error_response(e)
            return jsonify(body), status
