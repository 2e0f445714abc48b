"""
Core scheduler functionality.

This module contains the periodic trigger of the nurturing engine:
- NurturingScheduler class
- Thread management
- Main processing loop

The scheduler holds no nurturing state of its own. Each iteration is a plain
call to process_due_tasks(), exactly what an external cron hitting the
process endpoint does, so both can run side by side.
"""

import logging
import threading

from nurturing.services.nurturing_engine.task_processor import process_due_tasks
from nurturing.utils.dates import utcnow

logger = logging.getLogger(__name__)

# Global scheduler instance
_nurturing_scheduler = None

def get_nurturing_scheduler():
    """Get the global scheduler instance."""
    global _nurturing_scheduler
    if _nurturing_scheduler is None:
        _nurturing_scheduler = NurturingScheduler()
    return _nurturing_scheduler

class NurturingScheduler:
    """Simple background scheduler running nurturing passes at a fixed interval."""
    
    def __init__(self, app=None):
        self.app = app
        self.running = False
        self.thread = None
        self._stop_event = threading.Event()
        
        self.poll_interval_seconds = 300  # 5 minutes
        self.batch_size = None
        
        # Last pass bookkeeping, exposed by the status endpoint
        self.last_run_at = None
        self.last_processed_count = None
        self.last_error = None
        
        if app is not None:
            self.init_app(app)
    
    def init_app(self, app):
        """Initialize the scheduler with the Flask app."""
        self.app = app
        self.poll_interval_seconds = app.config.get('NURTURING_POLL_INTERVAL_SECONDS', 300)
        self.batch_size = app.config.get('NURTURING_BATCH_SIZE')
        logger.info(f"Nurturing scheduler initialized (interval {self.poll_interval_seconds}s)")
    
    def start(self):
        """Start the background processing thread."""
        if self.running:
            logger.warning("Scheduler is already running")
            return
        if self.app is None:
            raise RuntimeError("Scheduler has no Flask app; call init_app() first")
        
        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._process_loop, daemon=True)
        self.thread.start()
        logger.info("Nurturing scheduler started successfully")
    
    def stop(self):
        """Stop the background processing thread."""
        if not self.running:
            logger.info("Scheduler is already stopped")
            return
        
        logger.info("Stopping scheduler...")
        self.running = False
        self._stop_event.set()
        
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=30)
            if self.thread.is_alive():
                logger.warning("Scheduler thread did not terminate within 30 seconds")
        
        logger.info("Scheduler stopped")
    
    def run_once(self):
        """Run a single processing pass inside the app context."""
        with self.app.app_context():
            count = process_due_tasks(limit=self.batch_size)
        self.last_run_at = utcnow()
        self.last_processed_count = count
        self.last_error = None
        return count
    
    def _process_loop(self):
        """Main processing loop for the scheduler."""
        logger.info("Starting scheduler processing loop")
        
        while self.running:
            try:
                self.run_once()
            except Exception as e:
                self.last_error = str(e)
                logger.error(f"Error in scheduler processing loop: {str(e)}")
            
            self._stop_event.wait(self.poll_interval_seconds)
        
        logger.info("Scheduler processing loop ended")
    
    def status(self):
        return {
            'running': self.running,
            'thread_alive': self.thread.is_alive() if self.thread else False,
            'poll_interval_seconds': self.poll_interval_seconds,
            'batch_size': self.batch_size,
            'last_run_at': self.last_run_at.isoformat() if self.last_run_at else None,
            'last_processed_count': self.last_processed_count,
            'last_error': self.last_error
        }
