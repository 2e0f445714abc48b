# Import db from extensions to use the same instance
from nurturing.extensions import db

# Import all models to ensure they are registered with SQLAlchemy
from nurturing.models.enums import (
    NurturingChannel, NurturingType, EnrollmentStatus, TaskStatus, WhatsAppProvider
)
from nurturing.models.organisation import Organisation
from nurturing.models.lead import Lead
from nurturing.models.sequence import NurturingSequence, NurturingStep
from nurturing.models.enrollment import NurturingEnrollment
from nurturing.models.task import NurturingTask
from nurturing.models.lead_activity import LeadActivity
from nurturing.models.integration_config import IntegrationConfig

__all__ = [
    'db', 'NurturingChannel', 'NurturingType', 'EnrollmentStatus', 'TaskStatus', 'WhatsAppProvider',
    'Organisation', 'Lead', 'NurturingSequence', 'NurturingStep', 'NurturingEnrollment',
    'NurturingTask', 'LeadActivity', 'IntegrationConfig'
]
