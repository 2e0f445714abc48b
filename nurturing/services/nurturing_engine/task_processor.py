"""
Due task processing.

One call is one bounded pass over the tasks that are due right now. Each task
is claimed with a conditional PENDING -> EXECUTING update before anything is
sent, so two overlapping passes can never dispatch the same task. Tasks are
independent: whatever happens to one never stops the rest of the batch.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update

from nurturing.extensions import db
from nurturing.models import NurturingChannel, NurturingEnrollment, NurturingTask, EnrollmentStatus, TaskStatus
from nurturing.services.activity_log import record_activity
from nurturing.services.channels import get_channel_adapter
from nurturing.services.nurturing_engine.exceptions import ConfigurationGap, DispatchError
from nurturing.utils.dates import utcnow

logger = logging.getLogger(__name__)

ACTIVITY_PREFIX = '[Automated] '


def select_due_tasks(now: datetime, limit: Optional[int] = None) -> List[NurturingTask]:
    """PENDING tasks due at ``now``, oldest first, ties broken by step order."""
    query = NurturingTask.query.filter(
        NurturingTask.status == TaskStatus.PENDING,
        NurturingTask.scheduled_at <= now
    ).order_by(
        NurturingTask.scheduled_at.asc(),
        NurturingTask.step_order.asc(),
        NurturingTask.created_at.asc()
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def claim_task(task_id: str) -> bool:
    """Atomically move a task from PENDING to EXECUTING. False if someone else got there first."""
    result = db.session.execute(
        update(NurturingTask)
        .where(NurturingTask.id == task_id, NurturingTask.status == TaskStatus.PENDING)
        .values(status=TaskStatus.EXECUTING)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def _recipient_address(task: NurturingTask) -> str:
    lead = task.lead
    if lead is None:
        raise DispatchError(f"Lead {task.lead_id} no longer exists")
    
    if task.channel == NurturingChannel.EMAIL:
        address = lead.email
    else:
        address = lead.phone
    
    if not address:
        raise DispatchError(f"Lead {task.lead_id} has no address for channel {task.channel}")
    return address


def _resolve_adapter(task: NurturingTask):
    adapter = get_channel_adapter(task.organisation_id, task.channel)
    if adapter is None:
        raise ConfigurationGap(f"No {task.channel} adapter configured for organisation {task.organisation_id}")
    return adapter


def dispatch_task(task: NurturingTask) -> Dict[str, Any]:
    """
    Send a task through its channel.
    
    Returns the adapter result extended with a ``simulated`` flag.
    
    Raises:
        DispatchError: the adapter reported a failure or the lead has no address
    """
    try:
        adapter = _resolve_adapter(task)
    except ConfigurationGap as gap:
        logger.warning(f"[Nurturing] {gap.message} - simulating task {task.id}")
        logger.info(f"[Nurturing] SIMULATION {task.channel} to lead {task.lead_id}: {task.content}")
        return {'success': True, 'message_id': None, 'error': None, 'provider': 'simulation', 'simulated': True}
    
    recipient = _recipient_address(task)
    result = adapter.send(recipient, task.content, subject=task.subject)
    if not result.get('success'):
        raise DispatchError(result.get('error') or f"{task.channel} send failed")
    
    return dict(result, simulated=False)


def _mark_failed(task_id: str, error: str) -> None:
    """Last-resort FAILED transition after the normal bookkeeping blew up."""
    try:
        db.session.execute(
            update(NurturingTask)
            .where(NurturingTask.id == task_id, NurturingTask.status == TaskStatus.EXECUTING)
            .values(status=TaskStatus.FAILED, error=error)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"[Nurturing] Could not mark task {task_id} as FAILED: {str(e)}")


def complete_enrollment_if_done(enrollment_id: str, now: datetime) -> bool:
    """
    Mark an enrollment COMPLETED once none of its tasks is left to run.
    
    Safe to call repeatedly or concurrently: the status update only applies to
    an enrollment that is still ACTIVE.
    """
    remaining = NurturingTask.query.filter(
        NurturingTask.enrollment_id == enrollment_id,
        NurturingTask.status.in_(TaskStatus.OPEN)
    ).count()
    if remaining:
        return False
    
    result = db.session.execute(
        update(NurturingEnrollment)
        .where(NurturingEnrollment.id == enrollment_id, NurturingEnrollment.status == EnrollmentStatus.ACTIVE)
        .values(status=EnrollmentStatus.COMPLETED, completed_at=now)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    
    completed = result.rowcount == 1
    if completed:
        logger.info(f"[Nurturing] Enrollment {enrollment_id} completed")
    return completed


def process_task(task_id: str, now: datetime) -> Optional[bool]:
    """
    Claim, dispatch and settle a single task.
    
    Returns True when executed, False when failed, None when the task was
    already claimed or cancelled.
    """
    if not claim_task(task_id):
        logger.info(f"[Nurturing] Task {task_id} already claimed, skipping")
        return None
    
    task = db.session.get(NurturingTask, task_id)
    
    try:
        outcome = dispatch_task(task)
    except DispatchError as e:
        outcome = {'success': False, 'error': e.message, 'provider': None, 'message_id': None, 'simulated': False}
    except Exception as e:
        logger.error(f"[Nurturing] Failed to process task {task_id}: {str(e)}")
        outcome = {'success': False, 'error': str(e), 'provider': None, 'message_id': None, 'simulated': False}
    
    try:
        record_activity(
            task.lead_id,
            task.type,
            f"{ACTIVITY_PREFIX}{task.content}",
            {
                'nurturing_task_id': task.id,
                'enrollment_id': task.enrollment_id,
                'channel': task.channel,
                'success': outcome['success'],
                'simulated': outcome.get('simulated', False),
                'provider': outcome.get('provider'),
                'message_id': outcome.get('message_id'),
                'error': outcome.get('error')
            }
        )
        
        if outcome['success']:
            task.status = TaskStatus.EXECUTED
            task.executed_at = now
        else:
            task.status = TaskStatus.FAILED
            task.error = outcome.get('error')
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"[Nurturing] Failed to settle task {task_id}: {str(e)}")
        _mark_failed(task_id, str(e))
        outcome['success'] = False
    
    if task.enrollment_id:
        complete_enrollment_if_done(task.enrollment_id, now)
    
    return outcome['success']


def process_due_tasks(now: Optional[datetime] = None, limit: Optional[int] = None) -> int:
    """
    Execute every task that is due. Returns the number of tasks selected.
    
    Failed tasks stay FAILED; they are never retried.
    """
    now = now or utcnow()
    due_tasks = select_due_tasks(now, limit)
    task_ids = [task.id for task in due_tasks]
    
    executed = 0
    failed = 0
    skipped = 0
    
    for task_id in task_ids:
        try:
            result = process_task(task_id, now)
        except Exception as e:
            db.session.rollback()
            logger.error(f"[Nurturing] Unexpected error on task {task_id}: {str(e)}")
            failed += 1
            continue
        
        if result is None:
            skipped += 1
        elif result:
            executed += 1
        else:
            failed += 1
    
    if task_ids:
        logger.info(
            f"[Nurturing] Processed {len(task_ids)} due tasks: "
            f"{executed} executed, {failed} failed, {skipped} skipped"
        )
    return len(task_ids)
