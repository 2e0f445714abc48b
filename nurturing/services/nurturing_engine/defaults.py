"""
Default sequence bootstrapping.

Organisations get a ready-made "no answer" follow-up without configuring
anything: the first call creates it, later calls return the same row.
"""

import logging
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from nurturing.extensions import db
from nurturing.models import NurturingChannel
from nurturing.services.nurturing_engine.catalog import create_sequence, find_sequence_by_name
from nurturing.services.nurturing_engine.exceptions import InvalidSequenceError

logger = logging.getLogger(__name__)

DEFAULT_SEQUENCE_NAME = 'Relance - Pas de réponse'

# WhatsApp right away, an SMS reminder the next day, a last WhatsApp a day later
DEFAULT_SEQUENCE_STEPS = [
    {
        "order": 1,
        "channel": NurturingChannel.WHATSAPP,
        "type": NurturingChannel.WHATSAPP,
        "delay_in_hours": 1,
        "content": "Bonjour {{firstName}}, nous avons essayé de vous joindre au sujet de votre demande de formation. "
                   "Quand seriez-vous disponible pour un court échange ?"
    },
    {
        "order": 2,
        "channel": NurturingChannel.SMS,
        "type": NurturingChannel.SMS,
        "delay_in_hours": 23,
        "content": "Bonjour {{firstName}}, petit rappel : un conseiller formation souhaite vous rappeler. "
                   "Répondez à ce message pour convenir d'un créneau."
    },
    {
        "order": 3,
        "channel": NurturingChannel.WHATSAPP,
        "type": NurturingChannel.WHATSAPP,
        "delay_in_hours": 24,
        "content": "Bonjour {{firstName}}, dernière relance de notre part. "
                   "Si votre projet de formation est toujours d'actualité, nous restons à votre disposition."
    }
]


def _default_name() -> str:
    try:
        return current_app.config.get('DEFAULT_SEQUENCE_NAME') or DEFAULT_SEQUENCE_NAME
    except RuntimeError:
        # No application context
        return DEFAULT_SEQUENCE_NAME


def ensure_default_sequence(organisation_id: str, name: Optional[str] = None):
    """
    Find or create the canonical follow-up sequence of an organisation.
    
    The (organisation, name) unique constraint decides concurrent creations:
    the loser rolls back and returns the row the winner inserted. An existing
    inactive sequence with that name is reactivated rather than duplicated.
    """
    if name is not None and not isinstance(name, str):
        raise InvalidSequenceError("Sequence name must be a string")
    name = (name or _default_name()).strip()
    if not name:
        raise InvalidSequenceError("Sequence name is required")
    
    sequence = find_sequence_by_name(organisation_id, name)
    if sequence:
        return sequence
    
    try:
        sequence = create_sequence({
            'organisation_id': organisation_id,
            'name': name,
            'description': 'Séquence de relance automatique après un appel sans réponse',
            'steps': DEFAULT_SEQUENCE_STEPS
        })
        logger.info(f"Bootstrapped default sequence '{name}' for organisation {organisation_id}")
        return sequence
    except IntegrityError:
        db.session.rollback()
        logger.info(f"Default sequence '{name}' already exists for organisation {organisation_id}")
    
    sequence = find_sequence_by_name(organisation_id, name, active_only=False)
    if sequence is None:
        raise RuntimeError(f"Default sequence '{name}' vanished for organisation {organisation_id}")
    
    if not sequence.is_active:
        sequence.is_active = True
        db.session.commit()
        logger.info(f"Reactivated default sequence {sequence.id}")
    return sequence
