"""
Scheduler management endpoints.

This module contains functionality for:
- Scheduler status checking
- Starting scheduler
- Stopping scheduler
"""

import logging
from flask import jsonify

from nurturing.services.scheduler import get_nurturing_scheduler
from nurturing.utils.auth import cron_secret_required
from nurturing.utils.error_handling import handle_exception

logger = logging.getLogger(__name__)

# Import the blueprint from the package
from . import automation_bp


@automation_bp.route('/scheduler/status', methods=['GET'])
@cron_secret_required
def get_scheduler_status():
    """Get the current status of the nurturing scheduler."""
    try:
        return jsonify(get_nurturing_scheduler().status()), 200
    except Exception as e:
        return handle_exception(e, "getting scheduler status")


@automation_bp.route('/scheduler/start', methods=['POST'])
@cron_secret_required
def start_scheduler():
    """Start the nurturing scheduler."""
    try:
        scheduler = get_nurturing_scheduler()
        
        if scheduler.running:
            return jsonify({'message': 'Scheduler is already running'}), 200
        
        scheduler.start()
        
        return jsonify({
            'message': 'Scheduler started successfully',
            'status': 'running'
        }), 200
        
    except Exception as e:
        logger.error(f"Error starting scheduler: {str(e)}")
        return handle_exception(e, "starting scheduler")


@automation_bp.route('/scheduler/stop', methods=['POST'])
@cron_secret_required
def stop_scheduler():
    """Stop the nurturing scheduler."""
    try:
        scheduler = get_nurturing_scheduler()
        
        if not scheduler.running:
            return jsonify({'message': 'Scheduler is already stopped'}), 200
        
        scheduler.stop()
        
        return jsonify({
            'message': 'Scheduler stopped successfully',
            'status': 'stopped'
        }), 200
        
    except Exception as e:
        logger.error(f"Error stopping scheduler: {str(e)}")
        return handle_exception(e, "stopping scheduler")
