"""
Scheduler services package.

- core.py: Background thread that periodically runs the nurturing task processor
"""

from .core import NurturingScheduler, get_nurturing_scheduler

# Export the main scheduler class and function
__all__ = ['NurturingScheduler', 'get_nurturing_scheduler']
