import os
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking.main import app
from booking.api.deps import get_notifier
from booking.core.database import get_db, get_redis, Base
from booking.core.security import create_token_pair, get_password_hash
from booking.core.timeutils import utcnow
from booking.models.appointment import Appointment, AppointmentStatus
from booking.models.user import User

SAO_PAULO = ZoneInfo("America/Sao_Paulo")

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# bcrypt is slow; hash the shared test password once
PASSWORD = "Senha123"
PASSWORD_HASH = get_password_hash(PASSWORD)


class FakeRedis:
    def __init__(self):
        self.data = {}

    def setex(self, key, ttl, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    async def send(self, message: str) -> bool:
        self.messages.append(message)
        return True


class BrokenNotifier:
    async def send(self, message: str) -> bool:
        raise RuntimeError("twilio is down")


def civil(days: int = 0, hours: int = 0) -> str:
    """Sao Paulo wall-clock string relative to now."""
    moment = datetime.now(SAO_PAULO) + timedelta(days=days, hours=hours)
    return moment.strftime("%Y-%m-%d %H:%M")


def utc_naive(days: int = 0, hours: int = 0) -> datetime:
    return utcnow().replace(microsecond=0) + timedelta(days=days, hours=hours)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(db_session, notifier, fake_redis):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(username: str) -> User:
        user = User(username=username, password_hash=PASSWORD_HASH)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def auth_headers(make_user):
    """Create a user and return bearer headers for it."""
    def _auth_headers(username: str) -> dict:
        user = make_user(username)
        tokens = create_token_pair(user.id, user.username)
        return {"Authorization": f"Bearer {tokens.access_token}"}
    return _auth_headers


@pytest.fixture
def add_appointment(db_session):
    """Insert an appointment directly, bypassing booking rules."""
    def _add(username: str, date_time: datetime, service_type: str = "Corte") -> Appointment:
        appointment = Appointment(
            username=username,
            author="administrador",
            service_type=service_type,
            date_time=date_time,
            status=AppointmentStatus.SCHEDULED,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment
    return _add
