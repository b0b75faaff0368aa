"""
Service Errors
Error taxonomy shared by services and the JSON error handlers
"""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from bilgen.extensions import db

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for failures that are reported to the caller"""
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or out-of-range input"""
    status_code = 400


class AuthenticationError(ServiceError):
    """No authenticated actor on the request"""
    status_code = 401


class ForbiddenError(ServiceError):
    """Actor lacks the required capability or ownership"""
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    """Request clashes with the current state of a resource"""
    status_code = 409


class UpstreamError(ServiceError):
    """Content provider failure"""
    status_code = 502


def error_payload(message):
    return {"success": False, "message": message}


def register_error_handlers(app):
    """Turn service errors and unexpected failures into JSON responses"""

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.warning("%s: %s", type(error).__name__, error.message)
        return jsonify(error_payload(error.message)), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify(error_payload(error.description)), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception("Unhandled error while serving request")
        return jsonify(error_payload("Internal server error")), 500
