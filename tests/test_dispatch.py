import pytest

from sitecms.services import crud


def test_options_preflight_is_empty_200(client):
    resp = client.options("/pages")
    assert resp.status_code == 200
    assert resp.content == b""


@pytest.mark.parametrize("url", ["/pages", "/pages?action=nope", "/api/news?action="])
def test_unknown_action(client, url):
    resp = client.get(url)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid action"}


def test_wrong_method(client):
    resp = client.post("/pages?action=list")
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed"}


def test_invalid_json_body(editor_client):
    resp = editor_client.post(
        "/pages?action=create",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid input data"}


def test_json_body_must_be_an_object(editor_client):
    resp = editor_client.post("/pages?action=create", json=["title", "slug"])
    assert resp.json() == {"error": "Invalid input data"}


def test_api_prefix_and_bare_path_are_the_same_endpoint(editor_client):
    editor_client.post("/api/pages?action=create", json={"title": "A", "slug": "a"})
    bare = editor_client.get("/pages?action=list").json()["data"]["pages"]
    prefixed = editor_client.get("/api/pages?action=list").json()["data"]["pages"]
    assert bare == prefixed
    assert [p["slug"] for p in bare] == ["a"]


def test_unexpected_error_is_generic(client, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("secret table layout")

    monkeypatch.setattr(crud, "paginate", broken)
    resp = client.get("/pages?action=list", headers={"X-Request-ID": "rid-123"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "An unexpected error occurred"}
    assert "secret" not in resp.text
    assert resp.headers["X-Request-ID"] == "rid-123"


def test_request_id_is_generated(client):
    resp = client.get("/health")
    assert len(resp.headers["X-Request-ID"]) == 32


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] == "OK"
    assert body["data"]["database"] == "ok"
