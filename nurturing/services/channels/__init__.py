"""
Channel dispatch adapters.

One adapter per transport; the registry picks the adapter configured for an
organisation and channel:
- base.py: ChannelAdapter interface and result helpers
- sms.py: SMS through Twilio
- whatsapp.py: WhatsApp through Twilio or the Meta Cloud API
- email.py: Email through Resend
- registry.py: (organisation, channel) -> adapter lookup
"""

from .base import ChannelAdapter, ChannelAPIError
from .registry import get_channel_adapter

__all__ = ['ChannelAdapter', 'ChannelAPIError', 'get_channel_adapter']
