"""
API Error Responses

Turns domain errors and werkzeug HTTP exceptions into client responses.
JSON endpoints answer ``{"error": "<message>"}``; the viewer and raw
routes answer plain text. Technical detail goes to the log only.
"""

from typing import Optional

from flask import Flask, Response, current_app, jsonify
from flask_restx import Api
from werkzeug.exceptions import MethodNotAllowed, RequestEntityTooLarge

from gridbin.domain.errors import (
    ApplicationError,
    DomainError,
    ErrorCategory,
    FileTooLargeError,
    create_error_response,
)


def _log(error: ApplicationError, where: str) -> None:
    if error.status_code >= 500:
        current_app.logger.error(f"{where}: {error.technical_message or error.message}")
    else:
        current_app.logger.info(f"{where}: {error.technical_message or error.message}")


def domain_error_response(error: DomainError, where: str) -> tuple[dict, int]:
    """Log a domain error and build its (body, status) pair."""
    app_error = ApplicationError.from_domain_error(error)
    _log(app_error, where)
    return app_error.to_dict(), app_error.status_code


def text_domain_error(error: DomainError, where: str) -> Response:
    """Log a domain error and build its plain-text response."""
    app_error = ApplicationError.from_domain_error(error)
    _log(app_error, where)
    return text_error(app_error.category)


def text_error(category: ErrorCategory, message: Optional[str] = None) -> Response:
    app_error = ApplicationError(category, message=message)
    return Response(
        app_error.message.lower(), status=app_error.status_code, mimetype="text/plain"
    )


def _method_not_allowed(error: MethodNotAllowed) -> tuple[dict, int, dict]:
    body, status_code = create_error_response(ErrorCategory.METHOD_NOT_ALLOWED)
    headers = {"Allow": ", ".join(error.valid_methods)} if error.valid_methods else {}
    return body, status_code, headers


def _request_too_large(error: RequestEntityTooLarge) -> tuple[dict, int]:
    max_upload_size = current_app.config["GRIDBIN_MAX_UPLOAD_SIZE"]
    return domain_error_response(FileTooLargeError(max_upload_size), "Upload rejected by body limit")


def register_api_error_handlers(api: Api) -> None:
    """
    Register handlers on the REST API for errors raised outside a resource method.

    flask-restx answers errors on its own routes before the application
    handlers run, so the same handlers are registered on both.
    """
    api.errorhandler(MethodNotAllowed)(_method_not_allowed)
    api.errorhandler(RequestEntityTooLarge)(_request_too_large)


def register_error_handlers(app: Flask) -> None:
    """
    Register app-wide handlers for errors raised before a view runs.

    Routing errors (405) and werkzeug's request body limit (413) are not
    tied to a blueprint, so they are handled at the application level.

    Args:
        app: Flask application
    """

    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(error):
        body, status_code, headers = _method_not_allowed(error)
        return jsonify(body), status_code, headers

    @app.errorhandler(RequestEntityTooLarge)
    def request_too_large(error):
        body, status_code = _request_too_large(error)
        return jsonify(body), status_code
