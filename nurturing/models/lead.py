import uuid
from datetime import datetime
from nurturing.models import db


class Lead(db.Model):
    __tablename__ = 'leads'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organisation_id = db.Column(db.String(36), db.ForeignKey('organisations.id'), nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(50), nullable=False, default='NEW')
    # Pipeline stages: NEW, PROSPECTION, ATTEMPTED, NRP, RDV_FIXE, SIGNED, CONVERTED, DISQUALIFIED, ARCHIVED
    is_opt_out = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    
    # Relationships
    enrollments = db.relationship('NurturingEnrollment', backref='lead', lazy=True, cascade='all, delete-orphan')
    activities = db.relationship('LeadActivity', backref='lead', lazy=True, cascade='all, delete-orphan')
    
    def personalization_fields(self):
        """Read-only fields available to message templates."""
        return {
            'firstName': self.first_name,
            'lastName': self.last_name,
            'phone': self.phone,
            'email': self.email
        }
    
    def to_dict(self):
        return {
            'id': str(self.id),
            'organisation_id': str(self.organisation_id),
            'first_name': self.first_name,
            'last_name': self.last_name,
            'phone': self.phone,
            'email': self.email,
            'status': self.status,
            'is_opt_out': self.is_opt_out,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
    
    @property
    def full_name(self):
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        elif self.first_name:
            return self.first_name
        elif self.last_name:
            return self.last_name
        return "Unknown"
    
    def __repr__(self):
        return f'<Lead {self.full_name}>'
