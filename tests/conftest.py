import pytest

from app import create_app
from config import TestConfig
from extensions import db, socketio
from decodex.services import authoring_service, settings_service, team_service


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for tests that call services directly."""
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    resp = client.post("/admin/login", json={"password": TestConfig.ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client


@pytest.fixture
def socket_client_for(app):
    clients = []

    def _make(flask_client=None):
        sio = socketio.test_client(app, flask_test_client=flask_client)
        clients.append(sio)
        return sio

    yield _make
    for sio in clients:
        if sio.is_connected():
            sio.disconnect()


@pytest.fixture
def make_question(ctx):
    def _make(text, answer, points=100, **extra):
        data = {"question": text, "answer": answer, "points": points}
        data.update(extra)
        return authoring_service.create_question(data)
    return _make


@pytest.fixture
def make_catalog(make_question):
    """Creates ``n`` plain questions answered "answer 1" ... "answer n"."""
    def _make(n, points=100):
        return [make_question(f"Question {i}?", f"answer {i}", points=points) for i in range(1, n + 1)]
    return _make


@pytest.fixture
def make_team(ctx):
    def _make(name="Sherlock", password="secret"):
        return team_service.register_team(name, f"{name.lower()}@example.com", password)
    return _make


@pytest.fixture
def running_quiz(ctx):
    return settings_service.set_quiz_active(True)


def branch_spec(easy_points=100, hard_points=200):
    return {
        "easy_question": {"question": "Easy path?", "answer": "easy", "points": easy_points},
        "hard_question": {"question": "Hard path?", "answer": "hard", "points": hard_points},
    }


@pytest.fixture
def branch_data():
    return branch_spec
