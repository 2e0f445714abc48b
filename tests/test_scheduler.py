"""
Unit tests for the background nurturing scheduler.
"""

import pytest
from datetime import timedelta
from unittest.mock import patch

from nurturing.extensions import db
from nurturing.models import NurturingTask, TaskStatus
from nurturing.services.nurturing_engine import enroll
from nurturing.services.scheduler import NurturingScheduler, get_nurturing_scheduler
from nurturing.utils.dates import utcnow


class TestNurturingScheduler:
    """Test the NurturingScheduler class."""
    
    def test_initialization_from_config(self, app):
        app.config.update(NURTURING_POLL_INTERVAL_SECONDS=60, NURTURING_BATCH_SIZE=10)
        
        scheduler = NurturingScheduler(app)
        
        assert scheduler.running is False
        assert scheduler.thread is None
        assert scheduler.poll_interval_seconds == 60
        assert scheduler.batch_size == 10
    
    def test_start_requires_app(self):
        with pytest.raises(RuntimeError):
            NurturingScheduler().start()
    
    def test_start_stop(self, app):
        scheduler = NurturingScheduler(app)
        
        with patch.object(NurturingScheduler, '_process_loop'):
            scheduler.start()
            assert scheduler.running is True
            assert scheduler.thread is not None
            
            scheduler.start()  # already running, no second thread
            
            scheduler.stop()
        
        assert scheduler.running is False
        assert scheduler.status()['running'] is False
    
    def test_run_once_processes_due_tasks(self, app, sample_organisation, sample_lead, sample_sequence):
        enroll(sample_lead.id, sample_sequence.id, sample_organisation.id, now=utcnow() - timedelta(hours=30))
        scheduler = NurturingScheduler(app)
        
        assert scheduler.run_once() == 2
        
        status = scheduler.status()
        assert status['last_processed_count'] == 2
        assert status['last_run_at'] is not None
        assert status['last_error'] is None
        
        db.session.expire_all()
        statuses = sorted(task.status for task in NurturingTask.query.all())
        assert statuses == [TaskStatus.EXECUTED, TaskStatus.EXECUTED, TaskStatus.PENDING]
    
    def test_loop_records_errors(self, app):
        scheduler = NurturingScheduler(app)
        scheduler.running = True
        
        def fail_and_stop():
            scheduler.running = False
            raise RuntimeError("database down")
        
        with patch.object(scheduler, 'run_once', side_effect=fail_and_stop), \
             patch.object(scheduler._stop_event, 'wait'):
            scheduler._process_loop()
        
        assert scheduler.last_error == "database down"
    
    def test_global_instance_is_initialized_by_app(self, app):
        scheduler = get_nurturing_scheduler()
        
        assert scheduler is get_nurturing_scheduler()
        assert scheduler.app is app
