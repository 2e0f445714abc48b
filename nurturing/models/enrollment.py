import uuid
from datetime import datetime
from nurturing.models import db
from nurturing.models.enums import EnrollmentStatus


class NurturingEnrollment(db.Model):
    __tablename__ = 'nurturing_enrollments'
    
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lead_id = db.Column(db.String(36), db.ForeignKey('leads.id'), nullable=False, index=True)
    sequence_id = db.Column(db.String(36), db.ForeignKey('nurturing_sequences.id'), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=EnrollmentStatus.ACTIVE, index=True)
    enrolled_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    completed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    
    # Relationships
    tasks = db.relationship(
        'NurturingTask', backref='enrollment', lazy=True,
        cascade='all, delete-orphan', order_by='NurturingTask.scheduled_at'
    )
    
    def to_dict(self, include_tasks=False):
        data = {
            'id': str(self.id),
            'lead_id': str(self.lead_id),
            'sequence_id': str(self.sequence_id),
            'status': self.status,
            'enrolled_at': self.enrolled_at.isoformat() if self.enrolled_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'cancelled_at': self.cancelled_at.isoformat() if self.cancelled_at else None
        }
        if include_tasks:
            data['tasks'] = [task.to_dict() for task in self.tasks]
        return data
    
    def __repr__(self):
        return f'<NurturingEnrollment {self.id} ({self.status})>'
