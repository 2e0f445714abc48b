"""
Sequence catalog.

This module contains functionality for:
- Looking up sequences (by id, by organisation + name)
- Validating step definitions
- Creating, updating, replacing steps of and deleting sequences
"""

import logging
from typing import Any, Dict, List, Optional

from nurturing.extensions import db
from nurturing.models import NurturingSequence, NurturingStep, NurturingChannel, NurturingType
from nurturing.services.nurturing_engine.exceptions import NotFoundError, InvalidSequenceError
from nurturing.services.nurturing_engine.hydrator import unknown_placeholders
from nurturing.utils.dates import utcnow

logger = logging.getLogger(__name__)


def get_sequence(sequence_id: str) -> Optional[NurturingSequence]:
    """Get a sequence with its steps, or None."""
    return db.session.get(NurturingSequence, sequence_id)


def get_organisation_sequence(sequence_id: str, organisation_id: str) -> NurturingSequence:
    """Get a sequence owned by ``organisation_id``; foreign sequences are reported as missing."""
    sequence = get_sequence(sequence_id)
    if not sequence or sequence.organisation_id != organisation_id:
        raise NotFoundError(f"Sequence not found with id: {sequence_id}")
    return sequence


def find_sequence_by_name(organisation_id: str, name: str, active_only: bool = True) -> Optional[NurturingSequence]:
    """Find a sequence by its exact name within an organisation."""
    query = NurturingSequence.query.filter_by(organisation_id=organisation_id, name=name)
    if active_only:
        query = query.filter_by(is_active=True)
    return query.first()


def list_sequences(organisation_id: str, active_only: bool = True) -> List[NurturingSequence]:
    """Sequences of an organisation, oldest first."""
    query = NurturingSequence.query.filter_by(organisation_id=organisation_id)
    if active_only:
        query = query.filter_by(is_active=True)
    return query.order_by(NurturingSequence.created_at.asc()).all()


def validate_sequence_definition(steps: Any) -> Dict[str, Any]:
    """Validate a list of step definitions."""
    errors = []
    warnings = []
    
    if not isinstance(steps, list):
        errors.append("Steps must be a list")
        return {'valid': False, 'errors': errors, 'warnings': warnings}
    
    if not steps:
        errors.append("Sequence must have at least one step")
        return {'valid': False, 'errors': errors, 'warnings': warnings}
    
    seen_orders = set()
    for i, step in enumerate(steps):
        label = f"Step {i + 1}"
        if not isinstance(step, dict):
            errors.append(f"{label}: must be an object")
            continue
        
        channel = step.get('channel')
        if channel not in NurturingChannel.ALL:
            errors.append(f"{label}: Invalid channel '{channel}'")
        
        step_type = step.get('type', channel)
        if step_type not in NurturingType.ALL:
            errors.append(f"{label}: Invalid type '{step_type}'")
        
        delay = step.get('delay_in_hours', 0)
        if isinstance(delay, bool) or not isinstance(delay, int):
            errors.append(f"{label}: delay_in_hours must be an integer")
        elif delay < 0:
            errors.append(f"{label}: delay_in_hours cannot be negative")
        
        order = step.get('order', i + 1)
        if isinstance(order, bool) or not isinstance(order, int) or order < 1:
            errors.append(f"{label}: order must be a positive integer")
        elif order in seen_orders:
            errors.append(f"{label}: duplicate order {order}")
        else:
            seen_orders.add(order)
        
        content = step.get('content')
        if not isinstance(content, str) or not content.strip():
            errors.append(f"{label}: Missing content")
        else:
            for placeholder in unknown_placeholders(content):
                warnings.append(f"{label}: Unknown placeholder {placeholder} will be sent as-is")
        
        if step.get('subject') and channel != NurturingChannel.EMAIL:
            warnings.append(f"{label}: subject is ignored for {channel} steps")
        if channel == NurturingChannel.EMAIL and not step.get('subject'):
            warnings.append(f"{label}: email step has no subject")
    
    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }


def _build_steps(steps: List[Dict[str, Any]]) -> List[NurturingStep]:
    validation = validate_sequence_definition(steps)
    if not validation['valid']:
        raise InvalidSequenceError("Invalid sequence definition", details={'errors': validation['errors']})
    
    built = []
    for i, step in enumerate(steps):
        channel = step['channel']
        built.append(NurturingStep(
            order=step.get('order', i + 1),
            channel=channel,
            type=step.get('type', channel),
            delay_in_hours=step.get('delay_in_hours', 0),
            subject=step.get('subject') if channel == NurturingChannel.EMAIL else None,
            content=step['content']
        ))
    return sorted(built, key=lambda s: s.order)


def create_sequence(definition: Dict[str, Any]) -> NurturingSequence:
    """
    Create a sequence and its steps.
    
    Args:
        definition: {organisation_id, name, description?, is_active?, steps: [...]}
    
    Raises:
        InvalidSequenceError: missing name or invalid steps
        IntegrityError: a sequence with the same name already exists in the organisation
    """
    name = (definition.get('name') or '').strip()
    if not name:
        raise InvalidSequenceError("Sequence name is required")
    
    sequence = NurturingSequence(
        organisation_id=definition['organisation_id'],
        name=name,
        description=definition.get('description'),
        is_active=definition.get('is_active', True),
        steps=_build_steps(definition.get('steps') or [])
    )
    db.session.add(sequence)
    db.session.commit()
    
    logger.info(f"Created sequence '{sequence.name}' ({sequence.id}) with {len(sequence.steps)} steps")
    return sequence


def update_sequence(sequence_id: str, organisation_id: str, data: Dict[str, Any]) -> NurturingSequence:
    """Update sequence metadata (name, description, is_active)."""
    sequence = get_organisation_sequence(sequence_id, organisation_id)
    
    if 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            raise InvalidSequenceError("Sequence name is required")
        sequence.name = name
    if 'description' in data:
        sequence.description = data.get('description')
    if 'is_active' in data:
        sequence.is_active = bool(data.get('is_active'))
    sequence.updated_at = utcnow()
    
    db.session.commit()
    return sequence


def replace_steps(sequence_id: str, organisation_id: str, data: Dict[str, Any]) -> NurturingSequence:
    """
    Full update: metadata plus a new step list replacing the old one.
    
    Tasks already generated keep their own copy of the content and schedule,
    so in-flight enrollments are unaffected.
    """
    sequence = get_organisation_sequence(sequence_id, organisation_id)
    new_steps = _build_steps(data.get('steps') or [])
    
    if 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            raise InvalidSequenceError("Sequence name is required")
        sequence.name = name
    if 'description' in data:
        sequence.description = data.get('description')
    
    sequence.steps = new_steps
    sequence.updated_at = utcnow()
    db.session.commit()
    
    logger.info(f"Replaced steps of sequence {sequence.id} ({len(new_steps)} steps)")
    return sequence


def delete_sequence(sequence_id: str, organisation_id: str) -> None:
    """Delete a sequence with its steps, enrollments and tasks."""
    sequence = get_organisation_sequence(sequence_id, organisation_id)
    db.session.delete(sequence)
    db.session.commit()
    logger.info(f"Deleted sequence {sequence_id}")
