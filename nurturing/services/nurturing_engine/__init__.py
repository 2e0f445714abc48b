"""
Nurturing engine package.

This package contains the drip-campaign engine:
- hydrator.py: Template personalization
- catalog.py: Sequence storage and validation
- enrollment.py: Enrollment, supersession and task scheduling
- task_processor.py: Due task dispatch and enrollment completion
- defaults.py: Default sequence bootstrapping
- analytics.py: Sequence ROI metrics
- exceptions.py: Error taxonomy
"""

from .exceptions import (
    NurturingError, NotFoundError, InvalidSequenceError, LeadOptedOutError, DispatchError, ConfigurationGap
)
from .hydrator import hydrate
from .enrollment import enroll, cancel_active_enrollments
from .task_processor import process_due_tasks
from .defaults import ensure_default_sequence, DEFAULT_SEQUENCE_NAME

__all__ = [
    'NurturingError', 'NotFoundError', 'InvalidSequenceError', 'LeadOptedOutError', 'DispatchError',
    'ConfigurationGap', 'hydrate', 'enroll', 'cancel_active_enrollments', 'process_due_tasks',
    'ensure_default_sequence', 'DEFAULT_SEQUENCE_NAME'
]
