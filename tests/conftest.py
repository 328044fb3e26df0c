import pytest
from fastapi.testclient import TestClient

from clinic_api.config import Settings
from main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret="test-secret",
        database_url=f"sqlite:///{tmp_path / 'test.sqlite'}",
        bcrypt_rounds=4,
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.database.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    with app.state.database.session() as session:
        yield session


@pytest.fixture
def staff_id(client):
    resp = client.post(
        "/api/auth/register",
        json={"full_name": "Maria Souza", "username": "maria", "password": "s3cret"},
    )
    assert resp.status_code == 201
    return resp.json()["staff_id"]


@pytest.fixture
def make_patient(client):
    def _make(**fields):
        body = {"full_name": "Ana Silva", "primary_phone": "+551199999999"}
        body.update(fields)
        resp = client.post("/api/patients", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_record(client, staff_id):
    def _make(path_patient_id, visit_datetime="2024-03-01T10:00:00Z", **fields):
        body = {
            "visit_datetime": visit_datetime,
            "chief_complaint": "Anxiety",
            "staff_id": staff_id,
        }
        body.update(fields)
        resp = client.post(f"/api/patients/{path_patient_id}/records", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
