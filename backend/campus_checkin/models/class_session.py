"""Class session with an active window and a geofence."""
import uuid
from datetime import datetime
from campus_checkin import db
from campus_checkin.models.base import BaseModel

def new_session_id() -> str:
    return str(uuid.uuid4())

class ClassSession(BaseModel):
    """A scheduled class meeting during which check-ins are accepted."""
    
    __tablename__ = 'class_sessions'
    
    id = db.Column(db.String(36), primary_key=True, default=new_session_id)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    
    # Active window
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    ended_at = db.Column(db.DateTime, nullable=True)
    
    # Geofence
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    radius_meters = db.Column(db.Float, nullable=False)
    
    # Relationships
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')
    
    def is_expired(self, now: datetime) -> bool:
        """Check if the active window has closed."""
        return now > self.end_time
    
    def is_open(self, now: datetime) -> bool:
        return self.is_active and self.start_time <= now <= self.end_time
    
    def to_dict(self, now: datetime = None):
        """Convert to dictionary."""
        data = {
            'id': self.id,
            'course_id': self.course_id,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
            'is_active': self.is_active if now is None else self.is_open(now),
            'ended_at': self.ended_at.isoformat() if self.ended_at else None,
            'location': {
                'latitude': self.latitude,
                'longitude': self.longitude,
                'radius': self.radius_meters
            },
            'ephemeral': False
        }
        if self.course is not None:
            data['course'] = {
                'id': self.course.id,
                'name': self.course.name,
                'course_code': self.course.course_code
            }
        return data
    
    def __repr__(self):
        return f'<ClassSession {self.id}>'
