"""Database seeding service for demo data."""
from campus_checkin import db
from campus_checkin.models.user import User, UserRole
from campus_checkin.models.course import Course, CourseEnrollment
from campus_checkin.services.session_service import SessionService

# Lecture hall used by the demo course
DEMO_LATITUDE = 36.6372
DEMO_LONGITUDE = 127.4896
DEMO_RADIUS_METERS = 50

class SeedService:
    """Service to seed database with demo data."""

    @staticmethod
    def seed_all():
        """Seed all demo data and open a live session."""
        professor = SeedService.seed_user('professor@university.edu', 'Demo Professor',
                                          UserRole.PROFESSOR, 'professor123')
        students = [
            SeedService.seed_user(f'student{n}@university.edu', f'Demo Student {n}',
                                  UserRole.STUDENT, 'student123', student_number=f'2024{n:04d}')
            for n in range(1, 4)
        ]
        course = SeedService.seed_course(professor)

        for student in students:
            CourseEnrollment.ensure(course.id, student.id)

        session, _ = SessionService.create_session(course, duration_minutes=90)
        print(f"✅ Opened session {session.id} for {course.course_code}")
        return session

    @staticmethod
    def seed_user(email, name, role, password, student_number=None) -> User:
        user = User.query.filter_by(email=email).first()
        if user:
            return user

        user = User(email=email, name=name, role=role, student_number=student_number)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        print(f"✅ Created {role.value}: {email} / {password}")
        return user

    @staticmethod
    def seed_course(professor: User) -> Course:
        course = Course.query.filter_by(course_code='CS101').first()
        if course:
            return course

        course = Course(
            name='Introduction to Computer Science',
            course_code='CS101',
            professor_id=professor.id,
            classroom_latitude=DEMO_LATITUDE,
            classroom_longitude=DEMO_LONGITUDE,
            classroom_radius=DEMO_RADIUS_METERS
        )
        db.session.add(course)
        db.session.commit()
        print(f"✅ Created course {course.course_code}")
        return course
