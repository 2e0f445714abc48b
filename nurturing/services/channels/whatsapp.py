import logging
import re
from typing import Any, Dict, Optional

import requests

from nurturing.models import NurturingChannel, WhatsAppProvider
from nurturing.services.channels.base import ChannelAdapter, ChannelAPIError
from nurturing.services.channels.sms import twilio_send_message

logger = logging.getLogger(__name__)

META_GRAPH_API_URL = 'https://graph.facebook.com/v18.0'
TWILIO_SANDBOX_WHATSAPP_NUMBER = 'whatsapp:+14155238886'


def _whatsapp_address(number: str) -> str:
    return number if number.startswith('whatsapp:') else f"whatsapp:{number}"


class TwilioWhatsAppAdapter(ChannelAdapter):
    channel = NurturingChannel.WHATSAPP
    provider = WhatsAppProvider.TWILIO
    
    def __init__(self, account_sid, auth_token, from_number=None):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = _whatsapp_address(from_number or TWILIO_SANDBOX_WHATSAPP_NUMBER)
    
    def send(self, to: str, body: str, subject: Optional[str] = None) -> Dict[str, Any]:
        try:
            payload = twilio_send_message(
                self.account_sid, self.auth_token, self.from_number, _whatsapp_address(to), body, self.timeout
            )
        except ChannelAPIError as e:
            return self._failure(e)
        
        logger.info(f"[WHATSAPP] Twilio message sent to {to}: {payload['sid']}")
        return self._success(payload['sid'])


class MetaWhatsAppAdapter(ChannelAdapter):
    """WhatsApp Business Cloud API. Free-form text only works inside the 24h customer window."""
    channel = NurturingChannel.WHATSAPP
    provider = WhatsAppProvider.META
    
    def __init__(self, phone_number_id, access_token):
        self.phone_number_id = phone_number_id
        self.access_token = access_token
    
    def send(self, to: str, body: str, subject: Optional[str] = None) -> Dict[str, Any]:
        recipient = re.sub(r'[^0-9]', '', to)
        url = f"{META_GRAPH_API_URL}/{self.phone_number_id}/messages"
        
        try:
            response = requests.post(
                url,
                headers={
                    'Authorization': f'Bearer {self.access_token}',
                    'Content-Type': 'application/json'
                },
                json={
                    'messaging_product': 'whatsapp',
                    'to': recipient,
                    'type': 'text',
                    'text': {'body': body}
                },
                timeout=self.timeout
            )
            payload = response.json()
        except requests.exceptions.RequestException as e:
            return self._failure(f"Meta request failed: {str(e)}")
        except ValueError:
            return self._failure(f"Meta API error ({response.status_code})")
        
        messages = payload.get('messages') or []
        if response.ok and messages and messages[0].get('id'):
            logger.info(f"[WHATSAPP] Meta message sent to {recipient}: {messages[0]['id']}")
            return self._success(messages[0]['id'])
        
        error = (payload.get('error') or {}).get('message') or 'Meta send failed'
        return self._failure(error)
