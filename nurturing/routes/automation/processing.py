"""Cron trigger for nurturing processing passes."""

import logging
from flask import current_app, jsonify

from nurturing.services.nurturing_engine import process_due_tasks
from nurturing.utils.auth import cron_secret_required
from nurturing.utils.dates import utcnow
from nurturing.utils.error_handling import handle_exception

logger = logging.getLogger(__name__)

# Import the blueprint from the package
from . import automation_bp


@automation_bp.route('/nurturing/process', methods=['POST'])
@cron_secret_required
def process_nurturing():
    """Run one processing pass over the tasks that are due now."""
    try:
        started_at = utcnow()
        processed = process_due_tasks(now=started_at, limit=current_app.config.get('NURTURING_BATCH_SIZE'))
        
        return jsonify({
            'success': True,
            'processed_count': processed,
            'timestamp': started_at.isoformat()
        }), 200
        
    except Exception as e:
        logger.error(f"Nurturing processing pass failed: {str(e)}")
        return handle_exception(e, "processing nurturing tasks")
