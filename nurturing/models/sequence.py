import uuid
from datetime import datetime
from nurturing.models import db
from sqlalchemy import UniqueConstraint


class NurturingSequence(db.Model):
    __tablename__ = 'nurturing_sequences'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organisation_id = db.Column(db.String(36), db.ForeignKey('organisations.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    steps = db.relationship(
        'NurturingStep', backref='sequence', lazy=True,
        cascade='all, delete-orphan', order_by='NurturingStep.order'
    )
    enrollments = db.relationship('NurturingEnrollment', backref='sequence', lazy=True, cascade='all, delete-orphan')
    
    # The name is the find-or-create key of bootstrapped sequences
    __table_args__ = (
        UniqueConstraint('organisation_id', 'name', name='uq_sequence_organisation_name'),
    )
    
    def to_dict(self, include_steps=True):
        data = {
            'id': str(self.id),
            'organisation_id': str(self.organisation_id),
            'name': self.name,
            'description': self.description,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
        if include_steps:
            data['steps'] = [step.to_dict() for step in self.steps]
        return data
    
    def __repr__(self):
        return f'<NurturingSequence {self.name}>'


class NurturingStep(db.Model):
    __tablename__ = 'nurturing_steps'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sequence_id = db.Column(db.String(36), db.ForeignKey('nurturing_sequences.id'), nullable=False, index=True)
    order = db.Column(db.Integer, nullable=False)  # 1-based
    type = db.Column(db.String(20), nullable=False)
    channel = db.Column(db.String(20), nullable=False)  # SMS, WHATSAPP, EMAIL
    delay_in_hours = db.Column(db.Integer, nullable=False, default=0)  # relative to the previous step
    subject = db.Column(db.String(255), nullable=True)  # email only
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    def to_dict(self):
        return {
            'id': str(self.id),
            'sequence_id': str(self.sequence_id),
            'order': self.order,
            'type': self.type,
            'channel': self.channel,
            'delay_in_hours': self.delay_in_hours,
            'subject': self.subject,
            'content': self.content
        }
    
    def __repr__(self):
        return f'<NurturingStep {self.order} {self.channel}>'
