from flask import jsonify, request
from werkzeug.exceptions import HTTPException


class ServiceError(ValueError):
    """Business error raised by the service layer, rendered as JSON by the app."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class NotFoundError(ServiceError):
    status_code = 404


class InvariantViolation(ServiceError):
    # atomic update path and diagnostic path disagree; never shown to the caller
    status_code = 500


def _json_error(message, code):
    return jsonify({"success": False, "message": message}), code


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError):
        if e.status_code >= 500:
            app.logger.error(
                f"[error] {request.method} {request.path} status={e.status_code} "
                f"{type(e).__name__}: {e.message}"
            )
            return _json_error("Internal server error", e.status_code)

        app.logger.warning(
            f"[error] {request.method} {request.path} status={e.status_code} message={e.message}"
        )
        return _json_error(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _json_error(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        app.logger.exception(f"[error] {request.method} {request.path} unhandled: {e}")
        return _json_error("Internal server error", 500)
