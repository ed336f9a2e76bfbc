"""Tests for session lookup, expiry and the demo session cache."""
import uuid
from datetime import datetime, timedelta
from campus_checkin import db
from campus_checkin.models.class_session import ClassSession
from campus_checkin.services.session_registry import (
    SessionRegistry, DemoSessionCache, DemoSession
)
from campus_checkin.utils.helpers import utcnow
from conftest import create_session

T = datetime(2025, 3, 4, 9, 0, 0)

def make_demo(start=T, minutes=10, last_used=None):
    return DemoSession(
        id=str(uuid.uuid4()),
        course_name='Demo',
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        latitude=36.6372,
        longitude=127.4896,
        radius_meters=50,
        last_used_at=last_used or start
    )

def test_lookup_persistent_session(app, live_session):
    registry = app.extensions['session_registry']
    found = registry.lookup(live_session.id)

    assert isinstance(found, ClassSession)
    assert found.id == live_session.id
    assert registry.is_ephemeral(found) is False

def test_lookup_missing_session(app):
    registry = app.extensions['session_registry']
    assert registry.lookup(str(uuid.uuid4())) is None

def test_lookup_demo_session(app):
    registry = app.extensions['session_registry']
    demo = registry.create_demo_session('Walkthrough', 36.6372, 127.4896, 50, timedelta(minutes=15))

    found = registry.lookup(demo.id)
    assert found is demo
    assert registry.is_ephemeral(found) is True

def test_registries_are_isolated(app):
    first = SessionRegistry()
    second = SessionRegistry()
    demo = first.create_demo_session('Only here', 0.0, 0.0, 50, timedelta(minutes=5))

    assert first.lookup(demo.id) is demo
    assert second.lookup(demo.id) is None

def test_expire_if_past_marks_and_persists(app, course):
    registry = app.extensions['session_registry']
    session = create_session(course, started_minutes_ago=30, duration_minutes=10)

    result = registry.expire_if_past(session, utcnow())

    assert result.is_active is False
    assert result.ended_at == session.end_time
    db.session.expire_all()
    assert db.session.get(ClassSession, session.id).is_active is False

def test_expire_if_past_leaves_open_session(app, live_session):
    registry = app.extensions['session_registry']
    result = registry.expire_if_past(live_session, utcnow())

    assert result.is_active is True
    assert result.ended_at is None

def test_expire_if_past_handles_missing_and_demo(app):
    registry = SessionRegistry()
    assert registry.expire_if_past(None, T) is None

    demo = make_demo()
    registry.demo_cache.put(demo)
    registry.expire_if_past(demo, T + timedelta(minutes=11))
    assert demo.is_active is False

def test_sweep_removes_expired_idle_sessions():
    cache = DemoSessionCache(idle_grace=timedelta(seconds=60))
    expired = make_demo(start=T - timedelta(hours=1))
    live = make_demo(start=T)
    cache.put(expired)
    cache.put(live)

    removed = cache.sweep(T + timedelta(minutes=1))

    assert removed == 1
    assert expired.id not in cache
    assert live.id in cache

def test_sweep_spares_recently_used_sessions():
    cache = DemoSessionCache(idle_grace=timedelta(seconds=60))
    session = make_demo(start=T - timedelta(hours=1))
    cache.put(session)

    # a lookup racing the sweep refreshes last use
    now = T
    assert cache.get(session.id, now) is session
    assert cache.sweep(now + timedelta(seconds=30)) == 0
    assert session.id in cache

    assert cache.sweep(now + timedelta(seconds=61)) == 1
    assert session.id not in cache

def test_registry_sweeps_at_most_once_per_interval(app):
    cache = DemoSessionCache(idle_grace=timedelta(0))
    registry = SessionRegistry(demo_cache=cache, sweep_interval=timedelta(minutes=5))
    stale = make_demo(start=T - timedelta(hours=2))
    cache.put(stale)

    registry.lookup(str(uuid.uuid4()), now=T)
    assert len(cache) == 0

    second = make_demo(start=T - timedelta(hours=2))
    cache.put(second)
    registry.lookup(str(uuid.uuid4()), now=T + timedelta(minutes=1))
    assert second.id in cache

    registry.lookup(str(uuid.uuid4()), now=T + timedelta(minutes=6))
    assert second.id not in cache

def test_cli_sweep_command(app):
    registry = app.extensions['session_registry']
    stale = make_demo(start=utcnow() - timedelta(hours=3))
    registry.demo_cache.put(stale)

    runner = app.test_cli_runner()
    result = runner.invoke(args=['sweep-demo-sessions'])

    assert 'Removed 1 expired demo sessions.' in result.output
    assert stale.id not in registry.demo_cache

def test_injected_empty_cache_is_kept():
    cache = DemoSessionCache(idle_grace=timedelta(seconds=5))
    registry = SessionRegistry(demo_cache=cache)
    assert registry.demo_cache is cache

def test_factory_uses_configured_idle_grace(monkeypatch):
    from config.testing import TestingConfig
    from campus_checkin import create_app

    monkeypatch.setattr(TestingConfig, 'DEMO_SESSION_IDLE_GRACE_SECONDS', 5)
    app = create_app('testing')

    registry = app.extensions['session_registry']
    assert registry.demo_cache.idle_grace == timedelta(seconds=5)
    assert app.extensions['attendance_recorder'].registry is registry

def test_close_demo_session_is_idempotent():
    cache = DemoSessionCache()
    session = make_demo()
    cache.put(session)
    cache.claim(session.id, 7, {'student_id': 7}, T)

    assert cache.close(session.id) is True
    assert cache.close(session.id) is False
    assert cache.close('missing') is False
    assert session.is_active is False
    assert cache.attendees_snapshot(session.id) == [{'student_id': 7}]
    assert cache.attendees_snapshot('missing') == []
