"""
Unit tests for enrollment management.

Covers task scheduling, supersession of active enrollments, opt-out and bulk
enrollment.
"""

import pytest
from datetime import timedelta
from unittest.mock import patch

from nurturing.extensions import db
from nurturing.models import (
    NurturingEnrollment, NurturingSequence, NurturingStep, NurturingTask, EnrollmentStatus, TaskStatus
)
from nurturing.services.nurturing_engine import (
    enroll, cancel_active_enrollments, process_due_tasks,
    NotFoundError, InvalidSequenceError, LeadOptedOutError
)
from nurturing.services.nurturing_engine.enrollment import (
    compute_schedule, enroll_many, get_lead_enrollments, opt_in_lead, opt_out_lead
)

from .conftest import T0


class TestComputeSchedule:
    """Test cumulative delay computation."""
    
    def test_cumulative_offsets(self):
        steps = [
            NurturingStep(order=2, delay_in_hours=23),
            NurturingStep(order=1, delay_in_hours=1),
            NurturingStep(order=3, delay_in_hours=24)
        ]
        schedule = compute_schedule(steps, T0)
        assert [step.order for step, _ in schedule] == [1, 2, 3]
        assert [at for _, at in schedule] == [
            T0 + timedelta(hours=1),
            T0 + timedelta(hours=24),
            T0 + timedelta(hours=48)
        ]
    
    def test_zero_delays(self):
        steps = [NurturingStep(order=1, delay_in_hours=0), NurturingStep(order=2, delay_in_hours=0)]
        assert [at for _, at in compute_schedule(steps, T0)] == [T0, T0]


class TestEnroll:
    """Test enrolling a lead."""
    
    def test_creates_one_task_per_step(self, sample_organisation, sample_lead, sample_sequence):
        enrollment = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        assert enrollment.status == EnrollmentStatus.ACTIVE
        assert enrollment.enrolled_at == T0
        
        tasks = NurturingTask.query.filter_by(enrollment_id=enrollment.id).order_by(NurturingTask.scheduled_at).all()
        assert len(tasks) == 3
        assert [task.scheduled_at for task in tasks] == [
            T0 + timedelta(hours=1),
            T0 + timedelta(hours=24),
            T0 + timedelta(hours=48)
        ]
        assert [task.channel for task in tasks] == ['WHATSAPP', 'SMS', 'WHATSAPP']
        assert [task.step_order for task in tasks] == [1, 2, 3]
        assert all(task.status == TaskStatus.PENDING for task in tasks)
        assert all(task.organisation_id == sample_organisation.id for task in tasks)
    
    def test_content_is_hydrated_at_enrollment(self, sample_organisation, sample_lead, sample_sequence):
        enrollment = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        sample_lead.first_name = "Irène"
        db.session.commit()
        
        contents = [task.content for task in enrollment.tasks]
        assert contents == [
            "Bonjour Marie, on vous a manqué !",
            "Rappel pour Marie Curie",
            "Dernière relance Marie"
        ]
    
    def test_reenrollment_supersedes_active_enrollment(self, sample_organisation, sample_lead, sample_sequence):
        first = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        process_due_tasks(now=T0 + timedelta(hours=1))
        
        second = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0 + timedelta(hours=2))
        
        db.session.expire_all()
        first = db.session.get(NurturingEnrollment, first.id)
        assert first.status == EnrollmentStatus.CANCELLED
        assert first.cancelled_at == T0 + timedelta(hours=2)
        assert sorted(task.status for task in first.tasks) == [
            TaskStatus.CANCELLED, TaskStatus.CANCELLED, TaskStatus.EXECUTED
        ]
        
        assert second.status == EnrollmentStatus.ACTIVE
        assert all(task.status == TaskStatus.PENDING for task in second.tasks)
        assert NurturingEnrollment.query.filter_by(
            lead_id=sample_lead.id, status=EnrollmentStatus.ACTIVE
        ).count() == 1
    
    def test_unknown_sequence(self, sample_organisation, sample_lead):
        with pytest.raises(NotFoundError):
            enroll(sample_lead.id, 'missing-sequence', sample_organisation.id)
    
    def test_unknown_lead(self, sample_organisation, sample_sequence):
        with pytest.raises(NotFoundError):
            enroll('missing-lead', sample_sequence.id, sample_organisation.id)
        assert NurturingEnrollment.query.count() == 0
    
    def test_foreign_sequence(self, other_organisation, sample_lead, sample_sequence):
        with pytest.raises(NotFoundError):
            enroll(sample_lead.id, sample_sequence.id, other_organisation.id)
    
    def test_sequence_without_steps(self, sample_organisation, sample_lead):
        sequence = NurturingSequence(organisation_id=sample_organisation.id, name='Empty')
        db.session.add(sequence)
        db.session.commit()
        
        with pytest.raises(InvalidSequenceError):
            enroll(sample_lead.id, sequence.id, sample_organisation.id)
        assert NurturingEnrollment.query.count() == 0
    
    def test_opted_out_lead_is_refused(self, sample_organisation, sample_lead, sample_sequence):
        sample_lead.is_opt_out = True
        db.session.commit()
        
        with pytest.raises(LeadOptedOutError):
            enroll(sample_lead.id, sample_sequence.id, sample_organisation.id)
        assert NurturingEnrollment.query.count() == 0
    
    def test_failed_enrollment_keeps_previous_one(self, sample_organisation, sample_lead, sample_sequence):
        first = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        with patch('nurturing.services.nurturing_engine.enrollment.hydrate', side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        db.session.expire_all()
        assert db.session.get(NurturingEnrollment, first.id).status == EnrollmentStatus.ACTIVE
        assert NurturingEnrollment.query.count() == 1
        assert NurturingTask.query.filter_by(status=TaskStatus.PENDING).count() == 3


class TestCancelAndOptOut:
    """Test stopping a lead's nurturing."""
    
    def test_cancel_active_enrollments(self, sample_organisation, sample_lead, sample_sequence):
        enrollment = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        assert cancel_active_enrollments(sample_lead.id, now=T0) == 1
        
        db.session.expire_all()
        assert enrollment.status == EnrollmentStatus.CANCELLED
        assert all(task.status == TaskStatus.CANCELLED for task in enrollment.tasks)
        assert process_due_tasks(now=T0 + timedelta(days=5)) == 0
    
    def test_cancel_without_active_enrollment(self, sample_lead):
        assert cancel_active_enrollments(sample_lead.id) == 0
    
    def test_opt_out_stops_nurturing(self, sample_organisation, sample_lead, sample_sequence):
        enrollment = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        
        lead = opt_out_lead(sample_lead.id, sample_organisation.id)
        
        assert lead.is_opt_out is True
        db.session.expire_all()
        assert enrollment.status == EnrollmentStatus.CANCELLED
    
    def test_opt_in_allows_enrollment_again(self, sample_organisation, sample_lead, sample_sequence):
        opt_out_lead(sample_lead.id, sample_organisation.id)
        opt_in_lead(sample_lead.id, sample_organisation.id)
        
        enrollment = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id)
        assert enrollment.status == EnrollmentStatus.ACTIVE
    
    def test_opt_out_foreign_lead(self, other_organisation, sample_lead):
        with pytest.raises(NotFoundError):
            opt_out_lead(sample_lead.id, other_organisation.id)


class TestBulkAndHistory:
    """Test bulk enrollment and enrollment history."""
    
    def test_enroll_many_isolates_failures(self, sample_organisation, sample_lead, second_lead, sample_sequence):
        second_lead.is_opt_out = True
        db.session.commit()
        
        result = enroll_many([sample_lead.id, second_lead.id, 'missing-lead'], sample_sequence.id, sample_organisation.id)
        
        assert [enrollment.lead_id for enrollment in result['enrolled']] == [sample_lead.id]
        assert set(result['failed']) == {second_lead.id, 'missing-lead'}
    
    def test_get_lead_enrollments_newest_first(self, sample_organisation, sample_lead, sample_sequence):
        first = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0)
        second = enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=T0 + timedelta(hours=3))
        
        enrollments = get_lead_enrollments(sample_lead.id, sample_organisation.id)
        assert [e.id for e in enrollments] == [second.id, first.id]
