"""
Nurturing routes package.

This package contains the nurturing management endpoints:
- sequences.py: Sequence CRUD and default sequence bootstrapping
- enrollments.py: Enrollment, cancellation and opt-out of leads
- analytics.py: Sequence ROI
"""

from flask import Blueprint

# Create the main nurturing blueprint
nurturing_bp = Blueprint('nurturing', __name__)

# Import all route modules to register them
from . import sequences
from . import enrollments
from . import analytics

# Export the blueprint
__all__ = ['nurturing_bp']
