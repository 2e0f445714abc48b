import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ChannelAPIError(Exception):
    """Error returned by a channel provider."""
    def __init__(self, message, status_code=None, response_data=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class ChannelAdapter:
    """
    Sends one message through one transport.
    
    ``send`` never raises for provider errors: it returns
    ``{'success': bool, 'message_id': str|None, 'error': str|None, 'provider': str}``.
    Timeouts and transport retries are the adapter's business.
    """
    
    channel = None
    provider = None
    timeout = 30
    
    def send(self, to: str, body: str, subject: Optional[str] = None) -> Dict[str, Any]:
        raise NotImplementedError
    
    def _success(self, message_id=None) -> Dict[str, Any]:
        return {'success': True, 'message_id': message_id, 'error': None, 'provider': self.provider}
    
    def _failure(self, error) -> Dict[str, Any]:
        logger.error(f"[{self.channel}] {self.provider} send failed: {error}")
        return {'success': False, 'message_id': None, 'error': str(error), 'provider': self.provider}
    
    def __repr__(self):
        return f'<{self.__class__.__name__} {self.channel}/{self.provider}>'
