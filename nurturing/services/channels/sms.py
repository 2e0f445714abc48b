import logging
from typing import Any, Dict, Optional

import requests

from nurturing.models import NurturingChannel
from nurturing.services.channels.base import ChannelAdapter, ChannelAPIError

logger = logging.getLogger(__name__)

TWILIO_API_BASE_URL = 'https://api.twilio.com/2010-04-01'


def twilio_send_message(account_sid: str, auth_token: str, from_number: str, to: str, body: str, timeout: int = 30) -> Dict[str, Any]:
    """POST a message to the Twilio Messages API and return the JSON payload."""
    url = f"{TWILIO_API_BASE_URL}/Accounts/{account_sid}/Messages.json"
    try:
        response = requests.post(
            url,
            auth=(account_sid, auth_token),
            data={'To': to, 'From': from_number, 'Body': body},
            timeout=timeout
        )
    except requests.exceptions.RequestException as e:
        raise ChannelAPIError(f"Twilio request failed: {str(e)}")
    
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    
    if not response.ok or not payload.get('sid'):
        raise ChannelAPIError(
            payload.get('message') or f"Twilio API error ({response.status_code})",
            status_code=response.status_code,
            response_data=payload
        )
    return payload


class TwilioSmsAdapter(ChannelAdapter):
    channel = NurturingChannel.SMS
    provider = 'twilio'
    
    def __init__(self, account_sid, auth_token, from_number):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
    
    def send(self, to: str, body: str, subject: Optional[str] = None) -> Dict[str, Any]:
        try:
            payload = twilio_send_message(self.account_sid, self.auth_token, self.from_number, to, body, self.timeout)
        except ChannelAPIError as e:
            return self._failure(e)
        
        logger.info(f"[SMS] Twilio message sent to {to}: {payload['sid']}")
        return self._success(payload['sid'])
