from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from badge_issuer.main import app
from badge_issuer.repos.store import InMemoryStore
from tests.conftest import PNG_B64, PNG_BYTES, STORAGE


def _issuer_body(**overrides: object) -> dict:
    body = {
        "name": "Acme",
        "url": "acme.org",
        "description": "Makers",
        "image": PNG_B64,
        "email": "badges@acme.org",
    }
    body.update(overrides)
    return body


def test_create_issuer(client: TestClient, store: InMemoryStore) -> None:
    resp = client.post("/v1/issuer", json=_issuer_body())
    assert resp.status_code == 201
    body = resp.json()
    assert body["url"] == "http://acme.org"
    assert body["image"] == f"{STORAGE}/img.png"
    assert store.paths() == ["award.html", "issuer.json", "img.png"]
    assert store.read_file("img.png") == PNG_BYTES


def test_create_issuer_with_invalid_base64_image_is_422(
    client: TestClient, store: InMemoryStore
) -> None:
    resp = client.post("/v1/issuer", json=_issuer_body(image="not base64!"))
    assert resp.status_code == 422
    assert store.paths() == []


def test_create_issuer_rejects_bad_email(client: TestClient) -> None:
    resp = client.post("/v1/issuer", json=_issuer_body(email="nope"))
    assert resp.status_code == 422


def test_server_file_paths_are_not_read(
    client: TestClient, store: InMemoryStore, tmp_path: Path
) -> None:
    secret = tmp_path / ".env"
    secret.write_text("GITHUB_TOKEN=ghp_supersecret\n")

    resp = client.post(
        "/v1/classes",
        json={"name": "Foo", "image_path": str(secret), "criteria": "acme.org"},
    )

    assert resp.status_code == 422
    assert store.paths() == []


def test_create_class(client: TestClient, store: InMemoryStore) -> None:
    resp = client.post(
        "/v1/classes",
        json={
            "name": "Foo  Bar",
            "description": "Did the foo",
            "image": PNG_B64,
            "criteria": "https://acme.org/foo",
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["image"] == f"{STORAGE}/Foo_Bar/img.png"
    assert body["criteria"] == "https://acme.org/foo"
    assert body["issuer"] == f"{STORAGE}/issuer.json"
    assert store.paths() == ["Foo_Bar/class.json", "Foo_Bar/img.png"]
    assert store.read_file("Foo_Bar/img.png") == PNG_BYTES


@pytest.mark.parametrize("name", ["a/b", "..", "  "])
def test_create_class_with_unusable_name_is_422(
    client: TestClient, store: InMemoryStore, name: str
) -> None:
    resp = client.post(
        "/v1/classes", json={"name": name, "image": PNG_B64, "criteria": "acme.org"}
    )
    assert resp.status_code == 422
    assert store.paths() == []


def test_create_class_twice_is_conflict(client: TestClient) -> None:
    payload = {"name": "Foo", "image": PNG_B64, "criteria": "acme.org"}
    assert client.post("/v1/classes", json=payload).status_code == 201
    assert client.post("/v1/classes", json=payload).status_code == 409


def test_create_badge(client: TestClient, store: InMemoryStore) -> None:
    resp = client.post("/v1/badges", json={"class_name": "Foo_Bar", "email": "a@b.com"})
    assert resp.status_code == 201
    body = resp.json()
    uid = body["uid"]
    assert body["recipient"] == {"type": "email", "hashed": False, "identity": "a@b.com"}
    assert body["badge"] == f"{STORAGE}/Foo_Bar/class.json"
    assert body["verify"] == {"type": "hosted", "url": f"{STORAGE}/Foo_Bar/{uid}.json"}
    assert isinstance(body["issuedOn"], int)
    assert store.paths() == [f"Foo_Bar/{uid}.json"]


@pytest.mark.parametrize("class_name", ["Foo Bar", "Foo\tBar", "a/b", "..", ".", "x\\y"])
def test_create_badge_with_unusable_class_name_is_422(
    client: TestClient, store: InMemoryStore, class_name: str
) -> None:
    resp = client.post("/v1/badges", json={"class_name": class_name, "email": "a@b.com"})
    assert resp.status_code == 422
    assert store.paths() == []


def test_remote_store_failure_is_502(client: TestClient, monkeypatch) -> None:
    async def rejecting_write(path: str, commit_message: str, content_b64: str) -> dict:
        request = httpx.Request("PUT", f"https://api.github.com/repos/acme/badges/contents/{path}")
        response = httpx.Response(401, request=request)
        raise httpx.HTTPStatusError("unauthorized", request=request, response=response)

    monkeypatch.setattr(app.state.workflow._store, "write_file", rejecting_write)
    resp = client.post("/v1/badges", json={"class_name": "Foo_Bar", "email": "a@b.com"})
    assert resp.status_code == 502
    assert "401" in resp.json()["detail"]


def test_issuance_without_workflow_is_503() -> None:
    app.state.workflow = None
    app.state.init_error = None
    resp = TestClient(app).post("/v1/badges", json={"class_name": "X", "email": "a@b.com"})
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Badge store is not configured"
