"""
Adapter lookup keyed on (organisation, channel).

An organisation's IntegrationConfig decides which transport it uses. When an
organisation has no config row at all, the process-wide credentials from the
Flask config are used instead. ``None`` means nothing is configured: the
caller treats that as a configuration gap, not a failure.
"""

import logging
from typing import Optional

from flask import current_app

from nurturing.models import IntegrationConfig, NurturingChannel, WhatsAppProvider
from nurturing.services.channels.base import ChannelAdapter
from nurturing.services.channels.email import ResendEmailAdapter
from nurturing.services.channels.sms import TwilioSmsAdapter
from nurturing.services.channels.whatsapp import MetaWhatsAppAdapter, TwilioWhatsAppAdapter

logger = logging.getLogger(__name__)


def _sms_adapter(config: Optional[IntegrationConfig], settings) -> Optional[ChannelAdapter]:
    if config is not None:
        if config.sms_enabled and config.twilio_account_sid and config.twilio_auth_token and config.twilio_sms_from:
            return TwilioSmsAdapter(config.twilio_account_sid, config.twilio_auth_token, config.twilio_sms_from)
        return None
    
    if settings.get('TWILIO_ACCOUNT_SID') and settings.get('TWILIO_AUTH_TOKEN') and settings.get('TWILIO_SMS_FROM'):
        return TwilioSmsAdapter(settings['TWILIO_ACCOUNT_SID'], settings['TWILIO_AUTH_TOKEN'], settings['TWILIO_SMS_FROM'])
    return None


def _whatsapp_adapter(config: Optional[IntegrationConfig], settings) -> Optional[ChannelAdapter]:
    if config is not None:
        if not config.whatsapp_enabled:
            return None
        if config.whatsapp_provider == WhatsAppProvider.TWILIO and config.twilio_account_sid and config.twilio_auth_token:
            return TwilioWhatsAppAdapter(config.twilio_account_sid, config.twilio_auth_token, config.twilio_whatsapp_number)
        if config.whatsapp_provider == WhatsAppProvider.META and config.whatsapp_phone_number_id and config.whatsapp_access_token:
            return MetaWhatsAppAdapter(config.whatsapp_phone_number_id, config.whatsapp_access_token)
        return None
    
    if settings.get('TWILIO_ACCOUNT_SID') and settings.get('TWILIO_AUTH_TOKEN'):
        return TwilioWhatsAppAdapter(
            settings['TWILIO_ACCOUNT_SID'], settings['TWILIO_AUTH_TOKEN'], settings.get('TWILIO_WHATSAPP_NUMBER')
        )
    if settings.get('WHATSAPP_PHONE_NUMBER_ID') and settings.get('WHATSAPP_ACCESS_TOKEN'):
        return MetaWhatsAppAdapter(settings['WHATSAPP_PHONE_NUMBER_ID'], settings['WHATSAPP_ACCESS_TOKEN'])
    return None


def _email_adapter(config: Optional[IntegrationConfig], settings) -> Optional[ChannelAdapter]:
    api_key = settings.get('RESEND_API_KEY')
    if not api_key:
        return None
    
    if config is not None:
        from_email = config.email_from or settings.get('NURTURING_EMAIL_FROM')
        if config.email_enabled and from_email:
            return ResendEmailAdapter(api_key, from_email)
        return None
    
    if settings.get('NURTURING_EMAIL_FROM'):
        return ResendEmailAdapter(api_key, settings['NURTURING_EMAIL_FROM'])
    return None


_BUILDERS = {
    NurturingChannel.SMS: _sms_adapter,
    NurturingChannel.WHATSAPP: _whatsapp_adapter,
    NurturingChannel.EMAIL: _email_adapter,
}


def get_channel_adapter(organisation_id: str, channel: str) -> Optional[ChannelAdapter]:
    """Adapter configured for an organisation and channel, or None."""
    builder = _BUILDERS.get(channel)
    if builder is None:
        logger.warning(f"No adapter family for channel '{channel}'")
        return None
    
    config = IntegrationConfig.query.filter_by(organisation_id=organisation_id).first()
    return builder(config, current_app.config)
