"""
Error taxonomy of the nurturing engine.

Each error carries a code understood by nurturing.utils.error_handling, so
routes can turn it into the standard error envelope.
"""


class NurturingError(Exception):
    """Base class for nurturing engine errors."""
    code = 'INTERNAL_ERROR'

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(NurturingError):
    """Unknown sequence or lead, or one owned by another organisation."""
    code = 'NOT_FOUND'


class InvalidSequenceError(NurturingError):
    """A sequence that cannot be enrolled into or saved (no steps, bad step data)."""
    code = 'INVALID_SEQUENCE'


class LeadOptedOutError(NurturingError):
    """The lead asked not to receive automated messages."""
    code = 'LEAD_OPTED_OUT'


class DispatchError(NurturingError):
    """A single task could not be sent through its channel."""
    code = 'EXTERNAL_API_ERROR'


class ConfigurationGap(NurturingError):
    """No adapter configured for an organisation/channel pair. Logged, never fatal."""
    code = 'CONFIGURATION_GAP'
