"""
Tests: application wiring — health probes, uploads, error envelope, headers.
"""

import io

import pytest
from sqlalchemy.exc import OperationalError

from app import create_app
from app.config import ProductionConfig, _database_url
from app.services import node_service


def test_health_endpoints(client):
    assert client.get("/api/v1/health").get_json()["status"] == "ok"
    assert client.get("/api/v1/health/ready").status_code == 200
    res = client.get("/api/v1/health/live")
    assert res.status_code == 200
    assert res.get_json()["checks"]["database"]["status"] == "ok"


def test_request_id_is_echoed(client):
    res = client.get("/api/v1/nodes", headers={"X-Request-ID": "abc123"})

    assert res.headers["X-Request-ID"] == "abc123"
    assert "X-Request-Duration-Ms" in res.headers
    assert res.headers["X-Content-Type-Options"] == "nosniff"


def test_unknown_api_route_is_json_404(client):
    res = client.get("/api/v1/does-not-exist")

    assert res.status_code == 404
    assert res.get_json()["error"] == "Not found"


def test_non_json_body_rejected(client):
    res = client.post("/api/v1/nodes", data="name=x", content_type="text/plain")
    assert res.status_code == 415


def test_upload_and_serve_file(client, task, upload_dir):
    res = client.post(
        f"/api/v1/tasks/{task.id}/upload",
        data={"file": (io.BytesIO(b"hello"), "../notes v1.txt")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 201
    body = res.get_json()
    assert body["name"] == "../notes v1.txt"
    assert body["size"] == 5
    stored = body["url"].rsplit("/", 1)[1]
    assert stored.endswith("_notes_v1.txt")

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.data == b"hello"


def test_upload_without_file(client, task, upload_dir):
    res = client.post(f"/api/v1/tasks/{task.id}/upload", data={}, content_type="multipart/form-data")

    assert res.status_code == 400
    assert res.get_json()["error"] == "No file uploaded"


def test_database_errors_do_not_leak_details(client, monkeypatch):
    def _boom():
        raise OperationalError("SELECT secret FROM nodes", {}, Exception("disk I/O error"))

    monkeypatch.setattr(node_service, "list_nodes", _boom)

    res = client.get("/api/v1/nodes")

    assert res.status_code == 500
    body = res.get_json()
    assert body["error"] == "Internal server error"
    assert "secret" not in res.get_data(as_text=True)


def test_database_url_scheme_is_normalised(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://okr@db/okr")
    assert _database_url() == "postgresql://okr@db/okr"

    monkeypatch.delenv("DATABASE_URL")
    assert _database_url("sqlite://") == "sqlite://"


def test_production_app_refuses_to_start_without_database(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", None)

    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        create_app("production")
