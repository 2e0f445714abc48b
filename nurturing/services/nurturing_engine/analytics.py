"""Marketing ROI of nurturing sequences."""

import logging
from typing import Any, Dict, List

from nurturing.models import EnrollmentStatus
from nurturing.services.nurturing_engine.catalog import list_sequences

logger = logging.getLogger(__name__)

# Lead stages that count as a conversion
CONVERTED_STATUSES = ('RDV_FIXE', 'SIGNED', 'CONVERTED')


def get_marketing_roi(organisation_id: str) -> List[Dict[str, Any]]:
    """Enrollment and conversion counts per active sequence, best conversion rate first."""
    roi_data = []
    
    for sequence in list_sequences(organisation_id):
        enrollments = sequence.enrollments
        total_enrolled = len(enrollments)
        active = sum(1 for e in enrollments if e.status == EnrollmentStatus.ACTIVE)
        converted = sum(1 for e in enrollments if e.lead and e.lead.status in CONVERTED_STATUSES)
        rate = round(converted / total_enrolled * 100) if total_enrolled else 0
        
        roi_data.append({
            'id': sequence.id,
            'name': sequence.name,
            'total_enrolled': total_enrolled,
            'active': active,
            'converted': converted,
            'rate': rate
        })
    
    return sorted(roi_data, key=lambda row: row['rate'], reverse=True)
