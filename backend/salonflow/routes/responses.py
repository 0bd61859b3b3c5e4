# Overview: Maps service-layer exceptions to JSON error responses.

from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, AuthorizationError, describe_error
from ..services.lifecycle_service import LifecycleError
from ..services.reporting_service import ReportError
from ..validation import ValidationError, ConflictError


def error_response(exc: Exception, action: str):
    """
    (json, status) for an exception raised while trying to `action`.

    Domain errors carry their own message. Storage failures get a
    user-readable message from describe_error. Anything else is logged
    with its traceback and reported as a 500.
    """
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, (ConflictError, LifecycleError)):
        return jsonify({"error": str(exc)}), 409
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, AuthorizationError):
        return jsonify({"error": str(exc)}), 403
    if isinstance(exc, ReportError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, SQLAlchemyError):
        message, status = describe_error(exc)
        current_app.logger.warning("Failed to %s: %s", action, exc)
        return jsonify({"error": message}), status

    current_app.logger.exception("Failed to %s", action)
    return jsonify({"error": "Internal server error"}), 500
