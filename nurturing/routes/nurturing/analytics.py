"""Nurturing analytics endpoints."""

import logging
from flask import jsonify
from flask_jwt_extended import jwt_required

from nurturing.services.nurturing_engine.analytics import get_marketing_roi
from nurturing.utils.auth import current_organisation_id
from nurturing.utils.error_handling import handle_exception

logger = logging.getLogger(__name__)

# Import the blueprint from the package
from . import nurturing_bp


@nurturing_bp.route('/roi', methods=['GET'])
@jwt_required()
def get_sequences_roi():
    """Enrollment and conversion rate of each active sequence."""
    try:
        return jsonify({'sequences': get_marketing_roi(current_organisation_id())}), 200
    except Exception as e:
        return handle_exception(e, "computing sequence ROI")
