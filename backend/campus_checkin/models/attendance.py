"""Attendance record model."""
from enum import Enum
from campus_checkin import db
from campus_checkin.models.base import BaseModel
from campus_checkin.utils.helpers import utcnow

class AttendanceStatus(Enum):
    """Recorded attendance outcome."""
    PRESENT = 'present'
    LATE = 'late'
    ABSENT = 'absent'

class AttendanceRecord(BaseModel):
    """One student's attendance for one session."""
    
    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_session_student'),
    )
    
    session_id = db.Column(db.String(36), db.ForeignKey('class_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False)
    check_in_time = db.Column(db.DateTime, default=utcnow)
    location_verified = db.Column(db.Boolean, default=False, nullable=False)
    
    # Submitted location
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    accuracy = db.Column(db.Float, nullable=True)
    distance_meters = db.Column(db.Float, nullable=True)
    
    def to_dict(self):
        """Convert to dictionary."""
        data = super().to_dict()
        data['status'] = self.status.value
        return data
    
    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}-{self.session_id}>'
