import uuid
from datetime import datetime
from nurturing.models import db
from nurturing.models.enums import TaskStatus


class NurturingTask(db.Model):
    __tablename__ = 'nurturing_tasks'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lead_id = db.Column(db.String(36), db.ForeignKey('leads.id'), nullable=False, index=True)
    organisation_id = db.Column(db.String(36), db.ForeignKey('organisations.id'), nullable=False, index=True)
    enrollment_id = db.Column(db.String(36), db.ForeignKey('nurturing_enrollments.id'), nullable=True, index=True)
    step_id = db.Column(db.String(36), db.ForeignKey('nurturing_steps.id', ondelete='SET NULL'), nullable=True)
    step_order = db.Column(db.Integer, nullable=True)  # tie-break for equal scheduled_at
    type = db.Column(db.String(20), nullable=False)
    channel = db.Column(db.String(20), nullable=False)
    scheduled_at = db.Column(db.DateTime, nullable=False, index=True)
    executed_at = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=TaskStatus.PENDING, index=True)
    # Snapshot of the hydrated step, never updated after creation
    subject = db.Column(db.String(255), nullable=True)
    content = db.Column(db.Text, nullable=False)
    error = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    
    lead = db.relationship('Lead', lazy=True)
    
    def to_dict(self):
        return {
            'id': str(self.id),
            'lead_id': str(self.lead_id),
            'organisation_id': str(self.organisation_id),
            'enrollment_id': str(self.enrollment_id) if self.enrollment_id else None,
            'step_id': str(self.step_id) if self.step_id else None,
            'step_order': self.step_order,
            'type': self.type,
            'channel': self.channel,
            'scheduled_at': self.scheduled_at.isoformat() if self.scheduled_at else None,
            'executed_at': self.executed_at.isoformat() if self.executed_at else None,
            'status': self.status,
            'subject': self.subject,
            'content': self.content,
            'error': self.error
        }
    
    def __repr__(self):
        return f'<NurturingTask {self.channel} at {self.scheduled_at} ({self.status})>'
