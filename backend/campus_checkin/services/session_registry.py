"""Session lookup and expiry tracking."""
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Union

from campus_checkin import db
from campus_checkin.models.class_session import ClassSession
from campus_checkin.utils.helpers import utcnow

@dataclass
class DemoSession:
    """A transient session kept only in memory (demos, walkthroughs)."""
    id: str
    course_name: str
    start_time: datetime
    end_time: datetime
    latitude: float
    longitude: float
    radius_meters: float
    created_by: Optional[int] = None
    is_active: bool = True
    last_used_at: datetime = field(default_factory=utcnow)
    attendees: Dict[int, object] = field(default_factory=dict)

    def is_expired(self, now: datetime) -> bool:
        return now > self.end_time

    def is_open(self, now: datetime) -> bool:
        return self.is_active and self.start_time <= now <= self.end_time

    def to_dict(self, now: datetime = None):
        return {
            'id': self.id,
            'course_id': None,
            'course': {'name': self.course_name},
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
            'is_active': self.is_active if now is None else self.is_open(now),
            'ended_at': None,
            'location': {
                'latitude': self.latitude,
                'longitude': self.longitude,
                'radius': self.radius_meters
            },
            'ephemeral': True,
            'attendee_count': len(self.attendees)
        }

SessionLike = Union[ClassSession, DemoSession]

class DemoSessionCache:
    """Thread-safe in-memory store for demo sessions.

    Every read stamps ``last_used_at``. ``sweep`` only drops sessions whose
    window has closed *and* that have not been touched for ``idle_grace``, so a
    lookup racing the sweep keeps its session alive.
    """

    def __init__(self, idle_grace: timedelta = timedelta(seconds=60)):
        self.idle_grace = idle_grace
        self._sessions: Dict[str, DemoSession] = {}
        self._lock = threading.Lock()

    def put(self, session: DemoSession) -> None:
        with self._lock:
            self._sessions[session.id] = session

    def get(self, session_id: str, now: datetime = None) -> Optional[DemoSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_used_at = now or utcnow()
            return session

    def claim(self, session_id: str, student_id: int, entry, now: datetime = None) -> bool:
        """Atomically register a student's check-in.

        Returns False when the student already holds an entry. Raises KeyError
        when the session is gone.
        """
        with self._lock:
            session = self._sessions[session_id]
            session.last_used_at = now or utcnow()
            if student_id in session.attendees:
                return False
            session.attendees[student_id] = entry
            return True

    def has_attendee(self, session_id: str, student_id: int) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            return session is not None and student_id in session.attendees

    def attendee(self, session_id: str, student_id: int) -> Optional[dict]:
        """A student's recorded check-in for a session, if any."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            entry = session.attendees.get(student_id)
            return dict(entry) if entry is not None else None

    def close(self, session_id: str) -> bool:
        """Mark a session inactive. Returns True when it was still active."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not session.is_active:
                return False
            session.is_active = False
            return True

    def attendees_snapshot(self, session_id: str) -> List[dict]:
        """Copy of the recorded check-ins for a session."""
        with self._lock:
            session = self._sessions.get(session_id)
            return list(session.attendees.values()) if session is not None else []

    def sweep(self, now: datetime = None) -> int:
        """Remove sessions that are expired and idle. Returns how many went."""
        now = now or utcnow()
        with self._lock:
            stale = [
                session_id for session_id, session in self._sessions.items()
                if session.is_expired(now) and session.last_used_at + self.idle_grace < now
            ]
            for session_id in stale:
                del self._sessions[session_id]
        return len(stale)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

class SessionRegistry:
    """Resolves session ids and tracks active/expired transitions.

    Persistent sessions come from the database; demo sessions from an
    in-memory cache. The cache sweep is housekeeping only: expiry is always
    judged against a session's own ``end_time``.
    """

    def __init__(self, demo_cache: DemoSessionCache = None,
                 sweep_interval: timedelta = timedelta(minutes=5),
                 logger: logging.Logger = None):
        self.demo_cache = demo_cache if demo_cache is not None else DemoSessionCache()
        self.sweep_interval = sweep_interval
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self._last_sweep: Optional[datetime] = None
        self._sweep_lock = threading.Lock()

    def lookup(self, session_id: str, now: datetime = None) -> Optional[SessionLike]:
        """Return the session for ``session_id`` or None."""
        now = now or utcnow()
        self._maybe_sweep(now)

        session = db.session.get(ClassSession, session_id)
        if session is not None:
            return session

        return self.demo_cache.get(session_id, now)

    def expire_if_past(self, session: Optional[SessionLike], now: datetime = None) -> Optional[SessionLike]:
        """Mark a session inactive once its window has closed."""
        now = now or utcnow()
        if session is None or not session.is_active or not session.is_expired(now):
            return session

        if isinstance(session, ClassSession):
            session.is_active = False
            session.ended_at = session.end_time
            db.session.commit()
        elif not self.demo_cache.close(session.id):
            return session

        self.logger.info('Session %s expired at %s', session.id, session.end_time.isoformat())
        return session

    def is_ephemeral(self, session: SessionLike) -> bool:
        return isinstance(session, DemoSession)

    def create_demo_session(self, course_name: str, latitude: float, longitude: float,
                            radius_meters: float, duration: timedelta,
                            created_by: int = None, now: datetime = None) -> DemoSession:
        """Register a transient session starting now."""
        now = now or utcnow()
        session = DemoSession(
            id=str(uuid.uuid4()),
            course_name=course_name,
            start_time=now,
            end_time=now + duration,
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
            created_by=created_by,
            last_used_at=now
        )
        self.demo_cache.put(session)
        self.logger.info('Demo session %s created for %s', session.id, course_name)
        return session

    def sweep(self, now: datetime = None) -> int:
        """Run the demo cache sweep now."""
        now = now or utcnow()
        with self._sweep_lock:
            self._last_sweep = now
        removed = self.demo_cache.sweep(now)
        if removed:
            self.logger.debug('Swept %d expired demo sessions', removed)
        return removed

    def _maybe_sweep(self, now: datetime) -> None:
        with self._sweep_lock:
            due = self._last_sweep is None or now - self._last_sweep >= self.sweep_interval
            if due:
                self._last_sweep = now
        if due:
            self.demo_cache.sweep(now)
