import logging
from typing import Any, Dict, Optional

import resend

from nurturing.models import NurturingChannel

from nurturing.services.channels.base import ChannelAdapter

logger = logging.getLogger(__name__)


class ResendEmailAdapter(ChannelAdapter):
    channel = NurturingChannel.EMAIL
    provider = 'resend'
    
    def __init__(self, api_key, from_email):
        self.api_key = api_key
        self.from_email = from_email
    
    def send(self, to: str, body: str, subject: Optional[str] = None) -> Dict[str, Any]:
        resend.api_key = self.api_key
        try:
            response = resend.Emails.send({
                "from": self.from_email,
                "to": [to],
                "subject": subject or "",
                "text": body
            })
        except Exception as e:
            return self._failure(e)
        
        message_id = response.get('id') if isinstance(response, dict) else None
        logger.info(f"[EMAIL] Resend email sent to {to}: {message_id}")
        return self._success(message_id)
