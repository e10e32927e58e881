import os

# Antes de importar main: que el app de módulo no cree ficheros de BD
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from main import create_app
from app.core.config import Settings
from app.core.security import hash_password
from app.db.models.user import User
from app.schemas.race import DriverInfo, LapRecord, PositionSample, RaceSession
from app.services.openf1 import UpstreamError


class FakeOpenF1Client:
    """Sustituye a OpenF1Client en los tests: datos en memoria y fallos a demanda."""

    def __init__(self):
        self.positions = []
        self.laps = []
        # {session_key: [...]} para tests con varias sesiones
        self.session_positions = {}
        self.session_laps = {}
        self.sessions = []
        self.drivers = []
        self.fail = set()
        self.calls = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise UpstreamError(f"{name} no disponible")

    def get_positions(self, session_key):
        self._maybe_fail("positions")
        rows = self.session_positions.get(session_key, self.positions)
        return [PositionSample.model_validate(p) for p in rows]

    def get_laps(self, session_key):
        self._maybe_fail("laps")
        rows = self.session_laps.get(session_key, self.laps)
        return [LapRecord.model_validate(lap) for lap in rows]

    def get_sessions(self, year=None, session_name=None):
        self._maybe_fail("sessions")
        return [RaceSession.model_validate(s) for s in self.sessions]

    def get_drivers(self, session_key=None):
        self._maybe_fail("drivers")
        return [DriverInfo.model_validate(d) for d in self.drivers]

    def close(self):
        pass


@pytest.fixture
def openf1():
    return FakeOpenF1Client()


@pytest.fixture
def app(openf1):
    settings = Settings(database_url="sqlite://", secret_key="test-secret", log_level="WARNING")
    return create_app(settings, openf1_client=openf1)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


def _login(client, email, password):
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def user_headers(client):
    r = client.post("/auth/register", json={
        "username": "lando", "email": "lando@example.com", "password": "papaya"
    })
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def other_user_headers(client):
    r = client.post("/auth/register", json={
        "username": "oscar", "email": "oscar@example.com", "password": "papaya2"
    })
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, db):
    db.add(User(
        email="admin@example.com",
        username="admin",
        hashed_password=hash_password("admin123"),
        role="admin",
    ))
    db.commit()
    return _login(client, "admin@example.com", "admin123")
