"""
Request authentication helpers.

Management routes use a JWT whose ``organisation_id`` claim scopes every call.
Cron-style triggers use a shared bearer secret.
"""

import logging
from functools import wraps

from flask import abort, current_app, request
from flask_jwt_extended import get_jwt

from .error_handling import create_error_response

logger = logging.getLogger(__name__)


def current_organisation_id() -> str:
    """Organisation of the authenticated caller. Must be called under @jwt_required()."""
    organisation_id = get_jwt().get('organisation_id')
    if not organisation_id:
        abort(403)
    return organisation_id


def cron_secret_required(view):
    """Require ``Authorization: Bearer <CRON_SECRET>`` when a secret is configured."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        cron_secret = current_app.config.get('CRON_SECRET')
        if cron_secret and request.headers.get('Authorization') != f'Bearer {cron_secret}':
            logger.warning(f"Unauthorized trigger attempt on {request.path}")
            return create_error_response('UNAUTHORIZED', "Unauthorized", status_code=401)
        return view(*args, **kwargs)
    return wrapper
