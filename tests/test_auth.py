"""Registration, login and bearer-token checks."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from clinic_api import models
from clinic_api.config import JWT_ALGORITHM, Settings
from clinic_api.credentials import (
    CredentialService,
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)
from clinic_api.errors import Unauthorized
from clinic_api.time_utils import now_utc
from main import create_app


def test_register_then_login(client):
    resp = client.post("/api/auth/register", json={"full_name": "X", "username": "x1", "password": "p"})
    assert resp.status_code == 201
    staff_id = resp.json()["staff_id"]
    assert resp.json()["message"]

    resp = client.post("/api/auth/login", json={"username": "x1", "password": "p"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"] == {"id": staff_id, "name": "X"}


def test_password_is_stored_hashed(client, db):
    client.post("/api/auth/register", json={"full_name": "X", "username": "x1", "password": "plain-pw"})
    staff = db.query(models.Staff).filter(models.Staff.username == "x1").one()
    assert staff.password_hash != "plain-pw"
    assert staff.password_hash.startswith("$2")
    assert verify_password("plain-pw", staff.password_hash)


def test_register_duplicate_username_conflicts(client, db):
    body = {"full_name": "X", "username": "x1", "password": "p"}
    assert client.post("/api/auth/register", json=body).status_code == 201
    resp = client.post("/api/auth/register", json=dict(body, full_name="Y"))
    assert resp.status_code == 409
    assert db.query(models.Staff).filter(models.Staff.username == "x1").count() == 1


@pytest.mark.parametrize(
    "body",
    [
        {"username": "x1", "password": "p"},
        {"full_name": "X", "password": "p"},
        {"full_name": "X", "username": "x1", "password": ""},
    ],
)
def test_register_missing_fields(client, body):
    assert client.post("/api/auth/register", json=body).status_code == 400


def test_login_missing_fields(client):
    assert client.post("/api/auth/login", json={"username": "x1"}).status_code == 400


def test_wrong_password_and_unknown_user_look_identical(client, staff_id):
    wrong = client.post("/api/auth/login", json={"username": "maria", "password": "nope"})
    unknown = client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


def test_token_claims(client, settings, staff_id):
    token = client.post("/api/auth/login", json={"username": "maria", "password": "s3cret"}).json()["token"]
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    assert payload["staff_id"] == staff_id
    assert payload["full_name"] == "Maria Souza"
    assert payload["exp"] - payload["iat"] == 3600


def test_verify_token_roundtrip(settings):
    token = create_access_token(settings, "abc", "Someone")
    claims = verify_token(settings, token)
    assert claims.staff_id == "abc"
    assert claims.full_name == "Someone"


def test_verify_token_rejects_bad_signature(settings):
    token = create_access_token(settings, "abc", "Someone")
    other = Settings(jwt_secret="another-secret")
    with pytest.raises(Unauthorized):
        verify_token(other, token)


def test_verify_token_rejects_expired(settings):
    payload = {"staff_id": "abc", "exp": now_utc() - timedelta(minutes=1)}
    token = jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
    with pytest.raises(Unauthorized):
        verify_token(settings, token)


def test_verify_token_rejects_missing(settings):
    with pytest.raises(Unauthorized):
        verify_token(settings, None)


def test_service_verify_token(db, settings):
    service = CredentialService(db, settings)
    staff_id = service.register("Joana", "joana", "pw")
    result = service.login("joana", "pw")
    assert result["staff_id"] == staff_id
    assert service.verify_token(result["token"]).staff_id == staff_id


def test_malformed_stored_hash_does_not_verify():
    assert verify_password("pw", "not-a-bcrypt-hash") is False
    assert verify_password("pw", hash_password("pw", rounds=4)) is True


def test_me_requires_token(client, staff_id):
    assert client.get("/api/auth/me").status_code == 401

    token = client.post("/api/auth/login", json={"username": "maria", "password": "s3cret"}).json()["token"]
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["staff_id"] == staff_id


@pytest.fixture
def guarded_client(tmp_path):
    settings = Settings(
        jwt_secret="test-secret",
        database_url=f"sqlite:///{tmp_path / 'guarded.sqlite'}",
        bcrypt_rounds=4,
        auth_required=True,
    )
    app = create_app(settings)
    with TestClient(app) as c:
        yield c
    app.state.database.dispose()


def test_data_routes_require_token_when_enforced(guarded_client):
    for path in ("/api/patients", "/api/patients/x/records", "/api/general/all-records"):
        resp = guarded_client.get(path)
        assert resp.status_code == 401, path
        assert "error" in resp.json()

    resp = guarded_client.get("/api/patients", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_valid_token_passes_when_enforced(guarded_client):
    guarded_client.post("/api/auth/register", json={"full_name": "X", "username": "x1", "password": "p"})
    token = guarded_client.post("/api/auth/login", json={"username": "x1", "password": "p"}).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    resp = guarded_client.post(
        "/api/patients",
        json={"full_name": "Ana Silva", "primary_phone": "1"},
        headers=headers,
    )
    assert resp.status_code == 201
    assert guarded_client.get("/api/patients", headers=headers).status_code == 200


def test_unknown_user_still_runs_a_password_check(client, monkeypatch):
    from clinic_api import credentials

    checked = []
    real_verify = credentials.verify_password

    def recording_verify(password, stored):
        checked.append(stored)
        return real_verify(password, stored)

    monkeypatch.setattr(credentials, "verify_password", recording_verify)
    resp = client.post("/api/auth/login", json={"username": "ghost", "password": "not-a-real-password"})
    assert resp.status_code == 401
    assert len(checked) == 1
    assert checked[0].startswith("$2")
