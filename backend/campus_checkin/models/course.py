"""Course and enrollment models."""
from sqlalchemy.exc import IntegrityError
from campus_checkin import db
from campus_checkin.models.base import BaseModel

class Course(BaseModel):
    """A course taught by one professor."""
    
    __tablename__ = 'courses'
    
    name = db.Column(db.String(255), nullable=False)
    course_code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    professor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    
    # Default classroom geofence for new sessions
    classroom_latitude = db.Column(db.Float, nullable=True)
    classroom_longitude = db.Column(db.Float, nullable=True)
    classroom_radius = db.Column(db.Float, nullable=True)
    
    # Relationships
    sessions = db.relationship('ClassSession', backref='course', lazy='dynamic')
    enrollments = db.relationship('CourseEnrollment', backref='course', lazy='dynamic')
    
    def has_classroom_location(self) -> bool:
        return self.classroom_latitude is not None and self.classroom_longitude is not None
    
    def to_dict(self):
        """Convert to dictionary."""
        data = super().to_dict(exclude=['classroom_latitude', 'classroom_longitude', 'classroom_radius'])
        data['classroom_location'] = {
            'latitude': self.classroom_latitude,
            'longitude': self.classroom_longitude,
            'radius': self.classroom_radius
        } if self.has_classroom_location() else None
        return data
    
    def __repr__(self):
        return f'<Course {self.course_code}>'

class CourseEnrollment(BaseModel):
    """Student membership in a course."""
    
    __tablename__ = 'course_enrollments'
    __table_args__ = (
        db.UniqueConstraint('course_id', 'student_id', name='uq_enrollment_course_student'),
    )
    
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    
    @classmethod
    def ensure(cls, course_id: int, student_id: int) -> bool:
        """Enroll the student unless already enrolled. Returns True when added."""
        if cls.query.filter_by(course_id=course_id, student_id=student_id).first():
            return False
        
        db.session.add(cls(course_id=course_id, student_id=student_id))
        try:
            db.session.commit()
        except IntegrityError:
            # enrolled by a concurrent request
            db.session.rollback()
            return False
        return True
    
    def __repr__(self):
        return f'<CourseEnrollment {self.course_id}-{self.student_id}>'
