"""
Enrollment endpoints.

This module contains functionality for:
- Enrolling one or many leads into a sequence
- Listing the enrollments of a lead
- Stopping a lead's nurturing (cancel, opt-out)
"""

import logging
from flask import request, jsonify
from flask_jwt_extended import jwt_required

from nurturing.extensions import db
from nurturing.services.nurturing_engine import cancel_active_enrollments, enroll
from nurturing.services.nurturing_engine.enrollment import (
    enroll_many, get_lead_enrollments, get_organisation_lead, opt_in_lead, opt_out_lead
)
from nurturing.utils.auth import current_organisation_id
from nurturing.utils.error_handling import (
    handle_exception, handle_validation_error, validate_required_fields
)

logger = logging.getLogger(__name__)

# Import the blueprint from the package
from . import nurturing_bp


@nurturing_bp.route('/enrollments', methods=['POST'])
@jwt_required()
def enroll_lead():
    """Enroll a lead into a sequence, superseding its active enrollment."""
    try:
        data = request.get_json(silent=True) or {}
        
        error = validate_required_fields(data, ['lead_id', 'sequence_id'])
        if error:
            return error
        
        enrollment = enroll(data['lead_id'], data['sequence_id'], current_organisation_id())
        
        return jsonify({
            'message': 'Lead enrolled successfully',
            'enrollment': enrollment.to_dict(include_tasks=True)
        }), 201
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "enrolling lead")


@nurturing_bp.route('/enrollments/bulk', methods=['POST'])
@jwt_required()
def enroll_leads_bulk():
    """Enroll several leads into the same sequence."""
    try:
        data = request.get_json(silent=True) or {}
        
        error = validate_required_fields(data, ['lead_ids', 'sequence_id'])
        if error:
            return error
        
        lead_ids = data['lead_ids']
        if not isinstance(lead_ids, list) or not lead_ids:
            return handle_validation_error('lead_ids must be a non-empty list')
        
        result = enroll_many(lead_ids, data['sequence_id'], current_organisation_id())
        
        return jsonify({
            'message': f"Enrolled {len(result['enrolled'])} of {len(lead_ids)} leads",
            'enrolled': [enrollment.to_dict() for enrollment in result['enrolled']],
            'failed': result['failed']
        }), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "bulk enrolling leads")


@nurturing_bp.route('/leads/<lead_id>/enrollments', methods=['GET'])
@jwt_required()
def list_lead_enrollments(lead_id):
    """List current and past enrollments of a lead."""
    try:
        enrollments = get_lead_enrollments(lead_id, current_organisation_id())
        
        return jsonify({
            'enrollments': [enrollment.to_dict(include_tasks=True) for enrollment in enrollments],
            'total': len(enrollments)
        }), 200
        
    except Exception as e:
        return handle_exception(e, "listing lead enrollments")


@nurturing_bp.route('/leads/<lead_id>/cancel', methods=['POST'])
@jwt_required()
def cancel_lead_nurturing(lead_id):
    """Cancel the active enrollment of a lead and its pending tasks."""
    try:
        get_organisation_lead(lead_id, current_organisation_id())
        cancelled = cancel_active_enrollments(lead_id)
        
        return jsonify({
            'message': 'Nurturing cancelled',
            'cancelled_enrollments': cancelled
        }), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "cancelling lead nurturing")


@nurturing_bp.route('/leads/<lead_id>/opt-out', methods=['POST'])
@jwt_required()
def set_lead_opt_out(lead_id):
    """Opt a lead out of (or back in to) automated messages."""
    try:
        data = request.get_json(silent=True) or {}
        opt_out = data.get('opt_out', True)
        if not isinstance(opt_out, bool):
            return handle_validation_error('opt_out must be a boolean')
        
        organisation_id = current_organisation_id()
        lead = opt_out_lead(lead_id, organisation_id) if opt_out else opt_in_lead(lead_id, organisation_id)
        
        return jsonify({'lead': lead.to_dict()}), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "updating lead opt-out")
