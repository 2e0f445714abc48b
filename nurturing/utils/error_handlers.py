"""
Application-wide error handlers.

Anything a route does not turn into a response itself ends up here and is
rendered with the same error envelope as the route-level handlers.
"""

import logging
from flask import request
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from nurturing.extensions import db
from nurturing.services.nurturing_engine.exceptions import NurturingError
from .error_handling import (
    create_error_response,
    handle_exception,
    handle_nurturing_error
)

logger = logging.getLogger(__name__)

# HTTP status -> envelope code for errors raised by Flask/werkzeug
HTTP_ERROR_CODES = {
    400: 'BAD_REQUEST',
    401: 'UNAUTHORIZED',
    403: 'FORBIDDEN',
    404: 'NOT_FOUND',
}


def register_error_handlers(app):
    """Register the nurturing API error handlers on ``app``."""

    @app.errorhandler(HTTPException)
    def http_error(error):
        if error.code == 404:
            return create_error_response('NOT_FOUND', f"No endpoint at {request.path}")
        if error.code == 405:
            return create_error_response(
                'BAD_REQUEST',
                f"{request.method} is not supported on {request.path}",
                status_code=405
            )
        code = HTTP_ERROR_CODES.get(error.code, 'INTERNAL_ERROR' if error.code >= 500 else 'BAD_REQUEST')
        return create_error_response(code, error.description or error.name, status_code=error.code)

    @app.errorhandler(NurturingError)
    def nurturing_error(error):
        return handle_nurturing_error(error)

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        return handle_exception(error, f"{request.method} {request.path}")

    @app.errorhandler(Exception)
    def unhandled_error(error):
        logger.error(f"Unhandled {type(error).__name__} on {request.method} {request.path}: {str(error)}")
        return handle_exception(error, f"{request.method} {request.path}")
