"""
Automation routes package.

This package contains the endpoints that drive nurturing execution:
- processing.py: Cron trigger for a processing pass
- scheduler_control.py: Background scheduler management
"""

from flask import Blueprint

# Create the main automation blueprint
automation_bp = Blueprint('automation', __name__)

# Import all route modules to register them
from . import processing
from . import scheduler_control

# Export the blueprint
__all__ = ['automation_bp']
