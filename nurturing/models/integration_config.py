import uuid
from datetime import datetime
from nurturing.models import db


class IntegrationConfig(db.Model):
    """Per-organisation channel credentials used by the dispatch adapters."""
    __tablename__ = 'integration_configs'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organisation_id = db.Column(db.String(36), db.ForeignKey('organisations.id'), nullable=False, unique=True)
    
    # SMS (Twilio)
    sms_enabled = db.Column(db.Boolean, nullable=False, default=False)
    twilio_account_sid = db.Column(db.String(255), nullable=True)
    twilio_auth_token = db.Column(db.String(255), nullable=True)
    twilio_sms_from = db.Column(db.String(50), nullable=True)
    
    # WhatsApp (twilio or meta)
    whatsapp_enabled = db.Column(db.Boolean, nullable=False, default=False)
    whatsapp_provider = db.Column(db.String(20), nullable=True)
    twilio_whatsapp_number = db.Column(db.String(50), nullable=True)
    whatsapp_phone_number_id = db.Column(db.String(100), nullable=True)
    whatsapp_access_token = db.Column(db.String(512), nullable=True)
    
    # Email (Resend)
    email_enabled = db.Column(db.Boolean, nullable=False, default=False)
    email_from = db.Column(db.String(255), nullable=True)
    
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    organisation = db.relationship('Organisation', backref=db.backref('integration_config', uselist=False))
    
    def __repr__(self):
        return f'<IntegrationConfig for Organisation {self.organisation_id}>'
