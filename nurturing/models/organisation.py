import uuid
from datetime import datetime
from nurturing.models import db


class Organisation(db.Model):
    __tablename__ = 'organisations'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    
    # Relationships
    leads = db.relationship('Lead', backref='organisation', lazy=True, cascade='all, delete-orphan')
    sequences = db.relationship('NurturingSequence', backref='organisation', lazy=True, cascade='all, delete-orphan')
    
    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
    
    def __repr__(self):
        return f'<Organisation {self.name}>'
