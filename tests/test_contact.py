from datetime import datetime, timedelta

import pytest

from sitecms.core.config import settings
from sitecms.models import ContactMessage, Setting
from sitecms.services import notifications
from sitecms.utils.datetime import months_ago, utcnow

MESSAGE = {"name": "Grace", "email": "grace@example.com", "subject": "Fees", "message": "How much is P1?"}


def submit(c, **overrides):
    payload = dict(MESSAGE)
    payload.update(overrides)
    return c.post("/contact?action=submit", json=payload)


class FakeResponse:
    def raise_for_status(self):
        return None


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        return FakeResponse()

    monkeypatch.setattr(settings, "NOTIFY_WEBHOOK_URL", "http://hooks.test/notify")
    monkeypatch.setattr(notifications.httpx, "post", fake_post)
    return calls


def test_submit_stores_message_and_notifies(client, db, sent):
    db.add(Setting(setting_key="contact_email", setting_value="office@blessed.ac.ug"))
    db.commit()

    resp = submit(client)
    assert resp.json()["success"] == "Message sent successfully. We will get back to you soon!"
    message_id = resp.json()["data"]["message_id"]

    stored = db.get(ContactMessage, message_id)
    assert stored.status == "new"
    assert stored.ip_address

    assert len(sent) == 1
    url, body = sent[0]
    assert url == "http://hooks.test/notify"
    assert body["kind"] == "contact_message"
    assert body["recipient"] == "office@blessed.ac.ug"
    assert body["payload"]["message_id"] == message_id


def test_notification_failure_does_not_break_submit(client, monkeypatch):
    def boom(*args, **kwargs):
        raise notifications.httpx.ConnectError("down")

    monkeypatch.setattr(settings, "NOTIFY_WEBHOOK_URL", "http://hooks.test/notify")
    monkeypatch.setattr(notifications.httpx, "post", boom)
    assert submit(client).status_code == 200


def test_submit_validation(client):
    resp = client.post("/contact?action=submit", json={})
    assert resp.json() == {"error": "Invalid input data"}
    assert submit(client, message="").json() == {"error": "Name, email, and message are required"}
    assert submit(client, email="not-an-email").json() == {"error": "Invalid email address"}


def test_first_read_marks_message_read(editor_client):
    message_id = submit(editor_client).json()["data"]["message_id"]

    first = editor_client.get(f"/contact?action=get&id={message_id}").json()["data"]["message"]
    assert first["status"] == "new"
    again = editor_client.get(f"/contact?action=get&id={message_id}").json()["data"]["message"]
    assert again["status"] == "read"


def test_list_requires_login_and_filters(client, editor_client):
    assert client.get("/contact?action=list").status_code == 401

    submit(editor_client)
    submit(editor_client, name="Peter", email="peter@example.com", message="Transport?")
    data = editor_client.get("/contact?action=list&search=transport").json()["data"]
    assert [m["name"] for m in data["messages"]] == ["Peter"]
    assert data["pagination"]["total_items"] == 1


def test_update_status(editor_client):
    message_id = submit(editor_client).json()["data"]["message_id"]

    resp = editor_client.put("/contact?action=update_status", json={"id": message_id})
    assert resp.json() == {"error": "Message ID and status are required"}
    resp = editor_client.put("/contact?action=update_status", json={"id": message_id, "status": "spam"})
    assert resp.json() == {"error": "Invalid status"}

    resp = editor_client.put("/contact?action=update_status", json={"id": message_id, "status": "replied"})
    assert resp.json() == {"success": "Message status updated successfully"}
    data = editor_client.get("/contact?action=list&status=replied").json()["data"]
    assert [m["id"] for m in data["messages"]] == [message_id]


def test_delete_is_admin_only(editor_client, admin_client):
    message_id = submit(editor_client).json()["data"]["message_id"]
    assert editor_client.delete(f"/contact?action=delete&id={message_id}").status_code == 403
    assert admin_client.delete(f"/contact?action=delete&id={message_id}").json() == {
        "success": "Message deleted successfully"
    }
    assert admin_client.delete(f"/contact?action=delete&id={message_id}").status_code == 404


def test_stats(editor_client):
    first = submit(editor_client).json()["data"]["message_id"]
    submit(editor_client)
    editor_client.put("/contact?action=update_status", json={"id": first, "status": "archived"})

    stats = editor_client.get("/contact?action=stats").json()["data"]["stats"]
    assert stats["total"] == 2
    assert stats["new"] == 1
    assert stats["archived"] == 1
    assert stats["read"] == 0
    assert stats["today"] == stats["this_week"] == stats["this_month"] == 2


def test_stats_month_window_is_a_calendar_month(editor_client, db):
    now = utcnow()
    for days in (27, 40):
        db.add(ContactMessage(name="Old", email="old@example.com", message="hi", created_at=now - timedelta(days=days)))
    db.commit()

    stats = editor_client.get("/contact?action=stats").json()["data"]["stats"]
    assert stats["total"] == 2
    assert stats["this_week"] == 0
    assert stats["this_month"] == 1


def test_months_ago_clamps_to_month_end():
    assert months_ago(datetime(2024, 3, 31, 9, 30)) == datetime(2024, 2, 29, 9, 30)
    assert months_ago(datetime(2024, 1, 15)) == datetime(2023, 12, 15)
