"""
Sequence endpoints.

This module contains functionality for:
- Listing and reading sequences
- Creating sequences
- Updating metadata or replacing the steps of a sequence
- Deleting sequences
- Bootstrapping the default follow-up sequence
"""

import logging
from flask import request, jsonify
from flask_jwt_extended import jwt_required

from nurturing.extensions import db
from nurturing.services.nurturing_engine import ensure_default_sequence
from nurturing.services.nurturing_engine.catalog import (
    create_sequence, delete_sequence, get_organisation_sequence, list_sequences,
    replace_steps, update_sequence, validate_sequence_definition
)
from nurturing.services.nurturing_engine.hydrator import get_available_placeholders
from nurturing.utils.auth import current_organisation_id
from nurturing.utils.error_handling import (
    handle_exception, handle_validation_error, validate_required_fields
)

logger = logging.getLogger(__name__)

# Import the blueprint from the package
from . import nurturing_bp


@nurturing_bp.route('/sequences', methods=['GET'])
@jwt_required()
def list_organisation_sequences():
    """List the sequences of the caller's organisation."""
    try:
        organisation_id = current_organisation_id()
        include_inactive = request.args.get('include_inactive', 'false').lower() == 'true'
        sequences = list_sequences(organisation_id, active_only=not include_inactive)
        
        return jsonify({
            'sequences': [sequence.to_dict() for sequence in sequences],
            'total': len(sequences)
        }), 200
        
    except Exception as e:
        return handle_exception(e, "listing sequences")


@nurturing_bp.route('/sequences', methods=['POST'])
@jwt_required()
def create_organisation_sequence():
    """Create a sequence with its steps."""
    try:
        organisation_id = current_organisation_id()
        data = request.get_json(silent=True) or {}
        
        error = validate_required_fields(data, ['name', 'steps'])
        if error:
            return error
        
        validation = validate_sequence_definition(data['steps'])
        if not validation['valid']:
            return handle_validation_error('Invalid sequence definition', {
                'validation_errors': validation['errors']
            })
        
        sequence = create_sequence({
            'organisation_id': organisation_id,
            'name': data['name'],
            'description': data.get('description'),
            'is_active': data.get('is_active', True),
            'steps': data['steps']
        })
        
        return jsonify({
            'message': 'Sequence created successfully',
            'sequence': sequence.to_dict(),
            'warnings': validation['warnings']
        }), 201
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "creating sequence")


@nurturing_bp.route('/sequences/<sequence_id>', methods=['GET'])
@jwt_required()
def get_organisation_sequence_detail(sequence_id):
    """Get a sequence with its steps."""
    try:
        sequence = get_organisation_sequence(sequence_id, current_organisation_id())
        return jsonify({'sequence': sequence.to_dict()}), 200
        
    except Exception as e:
        return handle_exception(e, "getting sequence")


@nurturing_bp.route('/sequences/<sequence_id>', methods=['PATCH'])
@jwt_required()
def update_organisation_sequence(sequence_id):
    """Update name, description or active flag of a sequence."""
    try:
        data = request.get_json(silent=True) or {}
        sequence = update_sequence(sequence_id, current_organisation_id(), data)
        
        return jsonify({
            'message': 'Sequence updated successfully',
            'sequence': sequence.to_dict()
        }), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "updating sequence")


@nurturing_bp.route('/sequences/<sequence_id>', methods=['PUT'])
@jwt_required()
def replace_organisation_sequence(sequence_id):
    """Replace the steps (and optionally the metadata) of a sequence."""
    try:
        data = request.get_json(silent=True) or {}
        
        error = validate_required_fields(data, ['steps'])
        if error:
            return error
        
        sequence = replace_steps(sequence_id, current_organisation_id(), data)
        
        return jsonify({
            'message': 'Sequence updated successfully',
            'sequence': sequence.to_dict()
        }), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "replacing sequence steps")


@nurturing_bp.route('/sequences/<sequence_id>', methods=['DELETE'])
@jwt_required()
def delete_organisation_sequence(sequence_id):
    """Delete a sequence and everything generated from it."""
    try:
        delete_sequence(sequence_id, current_organisation_id())
        return jsonify({'message': 'Sequence deleted successfully'}), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "deleting sequence")


@nurturing_bp.route('/sequences/default', methods=['POST'])
@jwt_required()
def bootstrap_default_sequence():
    """Find or create the default no-answer follow-up sequence."""
    try:
        data = request.get_json(silent=True) or {}
        sequence = ensure_default_sequence(current_organisation_id(), data.get('name'))
        return jsonify({'sequence': sequence.to_dict()}), 200
        
    except Exception as e:
        db.session.rollback()
        return handle_exception(e, "bootstrapping default sequence")


@nurturing_bp.route('/placeholders', methods=['GET'])
@jwt_required()
def get_placeholders():
    """Placeholders available in step templates."""
    return jsonify({'placeholders': get_available_placeholders()}), 200
