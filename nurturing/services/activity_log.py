"""Append-only lead activity log."""

import logging
from typing import Any, Dict, Optional

from nurturing.extensions import db
from nurturing.models import LeadActivity

logger = logging.getLogger(__name__)

SYSTEM_USER_ID = 'SYSTEM'


def record_activity(lead_id: str, channel: str, content: str, metadata: Optional[Dict[str, Any]] = None,
                    user_id: str = SYSTEM_USER_ID) -> LeadActivity:
    """Add an activity entry to the current session. The caller commits."""
    activity = LeadActivity(
        lead_id=lead_id,
        user_id=user_id,
        type=channel,
        content=content,
        meta_json=metadata or {}
    )
    db.session.add(activity)
    return activity
