from datetime import datetime, timedelta

import pytest

from greenpoll import create_app
from greenpoll.config import TestingConfig
from greenpoll.extensions import db
from greenpoll.utils import clock as clock_module
from greenpoll.utils.auth import get_services


class FakeTimer:
    """Stands in for threading.Timer; fires only when a test says so."""

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock(datetime(2024, 1, 1, 12, 0, 0))
    monkeypatch.setattr(clock_module, "utcnow", fake)
    return fake


@pytest.fixture
def app(clock):
    FakeTimer.created = []
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        services = get_services()
        services.scheduler.timer_factory = FakeTimer
        yield app
        services.scheduler.stop()
        db.session.remove()
        db.drop_all()


@pytest.fixture
def services(app):
    return get_services()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def timers():
    """Live (armed, not cancelled) fake timers created during the test."""
    def _live():
        return [t for t in FakeTimer.created if t.started and not t.cancelled]
    return _live


@pytest.fixture
def make_user(services):
    counter = {"n": 0}

    def _make(username=None, email=None, password="correct-horse", verified=False):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        email = email or f"{username}@example.com"
        user = services.users.create_user(username, email, password)
        if verified:
            services.users.set_verified(user.id)
        return user

    return _make


@pytest.fixture
def make_poll(services, make_user):
    def _make(owner=None, title="Best tree?", options=("Oak", "Birch")):
        owner = owner or make_user()
        poll = services.polls.create_poll(owner.id, title)
        created = [services.poll_options.create_poll_option(poll.id, value) for value in options]
        return poll, created

    return _make
