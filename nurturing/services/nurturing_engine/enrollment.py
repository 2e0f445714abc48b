"""
Enrollment management.

This module contains functionality for:
- Enrolling a lead into a sequence (supersession + task scheduling)
- Cancelling a lead's active enrollments
- Bulk enrollment
- Opt-out / opt-in of a lead
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from nurturing.extensions import db
from nurturing.models import (
    Lead, NurturingEnrollment, NurturingStep, NurturingTask, EnrollmentStatus, TaskStatus
)
from nurturing.services.nurturing_engine.catalog import get_organisation_sequence
from nurturing.services.nurturing_engine.exceptions import (
    NotFoundError, InvalidSequenceError, LeadOptedOutError
)
from nurturing.services.nurturing_engine.hydrator import hydrate
from nurturing.utils.dates import utcnow

logger = logging.getLogger(__name__)


def compute_schedule(steps: Iterable[NurturingStep], start: datetime) -> List[Tuple[NurturingStep, datetime]]:
    """
    Absolute send time of every step.
    
    Each step's delay is relative to the previous step, so step k is due at
    start + sum(delay_in_hours of steps 1..k).
    """
    schedule = []
    cumulative_hours = 0
    for step in sorted(steps, key=lambda s: s.order):
        cumulative_hours += step.delay_in_hours or 0
        schedule.append((step, start + timedelta(hours=cumulative_hours)))
    return schedule


def get_organisation_lead(lead_id: str, organisation_id: str, lock: bool = False) -> Lead:
    query = Lead.query.filter_by(id=lead_id)
    if lock:
        # Serializes concurrent enrollments of the same lead (no-op on SQLite)
        query = query.with_for_update()
    lead = query.first()
    if not lead or lead.organisation_id != organisation_id:
        raise NotFoundError(f"Lead not found with id: {lead_id}")
    return lead


def _cancel_active(lead_id: str, now: datetime) -> int:
    """Cancel active enrollments and their pending tasks. Caller commits."""
    active_enrollments = NurturingEnrollment.query.filter_by(
        lead_id=lead_id,
        status=EnrollmentStatus.ACTIVE
    ).all()
    
    for enrollment in active_enrollments:
        cancelled_tasks = NurturingTask.query.filter_by(
            enrollment_id=enrollment.id,
            status=TaskStatus.PENDING
        ).update({'status': TaskStatus.CANCELLED})
        
        enrollment.status = EnrollmentStatus.CANCELLED
        enrollment.cancelled_at = now
        logger.info(f"Cancelled enrollment {enrollment.id} of lead {lead_id} ({cancelled_tasks} pending tasks)")
    
    return len(active_enrollments)


def enroll(lead_id: str, sequence_id: str, organisation_id: str, now: Optional[datetime] = None) -> NurturingEnrollment:
    """
    Enroll a lead into a sequence.
    
    Any active enrollment of the lead is cancelled first, then one PENDING
    task is created per step with its content hydrated from the lead's
    current fields. Everything happens in a single transaction.
    
    Raises:
        NotFoundError: sequence or lead missing, or owned by another organisation
        InvalidSequenceError: the sequence has no steps
        LeadOptedOutError: the lead opted out of automated messages
    """
    now = now or utcnow()
    
    sequence = get_organisation_sequence(sequence_id, organisation_id)
    if not sequence.steps:
        raise InvalidSequenceError(f"Sequence {sequence_id} has no steps")
    
    try:
        lead = get_organisation_lead(lead_id, organisation_id, lock=True)
        if lead.is_opt_out:
            raise LeadOptedOutError(f"Lead {lead_id} opted out of nurturing")
        
        superseded = _cancel_active(lead_id, now)
        
        enrollment = NurturingEnrollment(
            lead_id=lead_id,
            sequence_id=sequence.id,
            status=EnrollmentStatus.ACTIVE,
            enrolled_at=now
        )
        db.session.add(enrollment)
        db.session.flush()
        
        fields = lead.personalization_fields()
        for step, scheduled_at in compute_schedule(sequence.steps, now):
            db.session.add(NurturingTask(
                lead_id=lead_id,
                organisation_id=organisation_id,
                enrollment_id=enrollment.id,
                step_id=step.id,
                step_order=step.order,
                type=step.type,
                channel=step.channel,
                scheduled_at=scheduled_at,
                status=TaskStatus.PENDING,
                subject=hydrate(step.subject, fields) if step.subject else None,
                content=hydrate(step.content, fields)
            ))
        
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to enroll lead {lead_id} in sequence {sequence_id}: {str(e)}")
        raise
    
    logger.info(
        f"Enrolled lead {lead_id} in sequence '{sequence.name}' "
        f"({len(sequence.steps)} tasks, {superseded} enrollment(s) superseded)"
    )
    return enrollment


def cancel_active_enrollments(lead_id: str, now: Optional[datetime] = None) -> int:
    """Cancel every active enrollment of a lead. Returns how many were cancelled."""
    try:
        count = _cancel_active(lead_id, now or utcnow())
        db.session.commit()
        return count
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to cancel enrollments of lead {lead_id}: {str(e)}")
        raise


def enroll_many(lead_ids: List[str], sequence_id: str, organisation_id: str) -> Dict[str, Any]:
    """Enroll several leads; a failing lead does not stop the others."""
    enrolled = []
    failed = {}
    
    for lead_id in lead_ids:
        try:
            enrollment = enroll(lead_id, sequence_id, organisation_id)
            enrolled.append(enrollment)
        except Exception as e:
            failed[lead_id] = str(e)
            continue
    
    logger.info(f"Bulk enrollment in sequence {sequence_id}: {len(enrolled)} enrolled, {len(failed)} failed")
    return {'enrolled': enrolled, 'failed': failed}


def opt_out_lead(lead_id: str, organisation_id: str) -> Lead:
    """Flag the lead as opted out and stop its nurturing."""
    lead = get_organisation_lead(lead_id, organisation_id)
    try:
        lead.is_opt_out = True
        _cancel_active(lead_id, utcnow())
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Lead {lead_id} opted out of nurturing")
    return lead


def opt_in_lead(lead_id: str, organisation_id: str) -> Lead:
    """Allow automated messages again. Past enrollments are not resumed."""
    lead = get_organisation_lead(lead_id, organisation_id)
    lead.is_opt_out = False
    db.session.commit()
    logger.info(f"Lead {lead_id} opted back in to nurturing")
    return lead


def get_lead_enrollments(lead_id: str, organisation_id: str) -> List[NurturingEnrollment]:
    """Current and past enrollments of a lead, newest first."""
    get_organisation_lead(lead_id, organisation_id)
    return NurturingEnrollment.query.filter_by(lead_id=lead_id).order_by(
        NurturingEnrollment.enrolled_at.desc()
    ).all()
