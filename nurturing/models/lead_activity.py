import uuid
from datetime import datetime
from nurturing.models import db
from sqlalchemy import JSON


class LeadActivity(db.Model):
    __tablename__ = 'lead_activities'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lead_id = db.Column(db.String(36), db.ForeignKey('leads.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), nullable=False)  # SYSTEM for automated entries
    type = db.Column(db.String(20), nullable=False)  # SMS, WHATSAPP, EMAIL, NOTE, ...
    content = db.Column(db.Text, nullable=False)
    meta_json = db.Column(JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    
    def to_dict(self):
        return {
            'id': str(self.id),
            'lead_id': str(self.lead_id),
            'user_id': self.user_id,
            'type': self.type,
            'content': self.content,
            'meta_json': self.meta_json,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
    
    def __repr__(self):
        return f'<LeadActivity {self.type} for Lead {self.lead_id}>'
