# tests/test_api.py
import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.app import create_app
from app.bot.classifier import PatternClassifier
from app.bot.services.commands import CommandService
from infrastructure.github_content import GitHubContentClient
from infrastructure.info_store import InfoStore

from tests.conftest import OWNER_CHAT, SECRET, make_settings


def update(text, chat_id=OWNER_CHAT):
    return {"update_id": 1, "message": {"message_id": 7, "text": text, "chat": {"id": chat_id, "type": "private"}}}


@pytest.fixture
def client(settings, store, service):
    return TestClient(create_app(settings, store=store, commands=service))


def build_client(settings, notifier, pending):
    store = InfoStore(settings)
    service = CommandService(settings, store, PatternClassifier(), notifier, pending)
    return TestClient(create_app(settings, store=store, commands=service)), store

# ==========================================
# WEBHOOK
# ==========================================

def test_webhook_applies_command(client, store, notifier):
    response = client.post(f"/api/telegram?secret={SECRET}", json=update("set name Night Owl"))

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert store.path.exists()
    assert '"name": "Night Owl"' in store.path.read_text(encoding="utf-8")
    assert notifier.messages[-1][0] == OWNER_CHAT


def test_webhook_path_secret_alias(client, store):
    response = client.post(f"/telegram-webhook/{SECRET}", json=update("set address 45 Vinyl Ave, Turku"))

    assert response.status_code == 200
    assert '"city": "Turku"' in store.path.read_text(encoding="utf-8")


@pytest.mark.parametrize("url", ["/api/telegram", "/api/telegram?secret=wrong", "/telegram-webhook/wrong"])
def test_webhook_rejects_bad_secret(client, store, notifier, url):
    response = client.post(url, json=update("set name Hacked"))

    assert response.status_code == 401
    assert not store.path.exists()
    assert notifier.messages == []


def test_webhook_rejects_everything_without_configured_secret(tmp_path, notifier, pending):
    client, store = build_client(make_settings(tmp_path, telegram_webhook_secret=""), notifier, pending)

    response = client.post("/api/telegram?secret=", json=update("set name Hacked"))

    assert response.status_code == 401
    assert not store.path.exists()


def test_webhook_rejects_chat_outside_allowlist(tmp_path, notifier, pending):
    settings = make_settings(tmp_path, admin_chat_ids=f"{OWNER_CHAT}, 99")
    client, store = build_client(settings, notifier, pending)

    response = client.post(f"/api/telegram?secret={SECRET}", json=update("set name Hacked", chat_id=1))

    assert response.status_code == 403
    assert not store.path.exists()

    response = client.post(f"/api/telegram?secret={SECRET}", json=update("set name Allowed"))
    assert response.status_code == 200
    assert '"name": "Allowed"' in store.path.read_text(encoding="utf-8")


@pytest.mark.parametrize("body", [{}, {"message": {"chat": {"id": 1}}}, {"edited_message": {}}])
def test_webhook_acknowledges_updates_without_text(client, notifier, body):
    response = client.post(f"/api/telegram?secret={SECRET}", json=body)

    assert response.status_code == 200
    assert notifier.messages == []


def test_webhook_acknowledges_even_when_processing_fails(tmp_path, notifier, pending):
    settings = make_settings(tmp_path, github_owner="nooti", github_repo="site", github_token="t")
    store = InfoStore(settings)

    class FailingMirror:
        async def write_file(self, content, message):
            raise RuntimeError("github down")

    store.mirror = FailingMirror()
    service = CommandService(settings, store, PatternClassifier(), notifier, pending)
    client = TestClient(create_app(settings, store=store, commands=service))

    response = client.post(f"/api/telegram?secret={SECRET}", json=update("set name Local Only"))

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert '"name": "Local Only"' in store.path.read_text(encoding="utf-8")

# ==========================================
# INFO API + PAGE
# ==========================================

def test_get_info_returns_camelcase_document(client):
    data = client.get("/api/info").json()

    assert data["name"] == "Nooti Coffee"
    assert data["backgroundUrl"].startswith("https://")
    assert data["hours"][0] == {"day": "Mon", "open": "08:00", "close": "18:00", "closed": False}


def test_post_info_normalizes_legacy_body(client):
    body = {
        "name": "Legacy Cafe",
        "address": "2 Old St",
        "city": "Oulu",
        "hours": [{"days": "Mon–Fri", "open": "09:00", "close": "17:00"}, {"days": "Sun", "closed": True}],
    }

    response = client.post(f"/api/info?secret={SECRET}", json=body)
    data = client.get("/api/info").json()

    assert response.status_code == 200
    assert [entry["day"] for entry in data["hours"]] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sun"]
    assert data["backgroundUrl"].startswith("https://images.unsplash.com/")
    assert "updatedAt" in data


def test_post_info_requires_secret(client):
    response = client.post("/api/info", json={"name": "Nope"})

    assert response.status_code == 403


def test_post_info_rejects_non_object(client):
    response = client.post(f"/api/info?secret={SECRET}", json=["not", "an", "object"])

    assert response.status_code == 422


def test_post_info_with_unreachable_mirror_is_bad_gateway(tmp_path, notifier, pending):
    settings = make_settings(tmp_path, github_owner="nooti", github_repo="site", github_token="t")

    def handler(request):
        raise httpx.ConnectError("network down", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    store = InfoStore(settings, mirror=GitHubContentClient(settings, http=http))
    service = CommandService(settings, store, PatternClassifier(), notifier, pending)
    client = TestClient(create_app(settings, store=store, commands=service))

    response = client.post(f"/api/info?secret={SECRET}", json={"name": "Offline Cafe"})

    assert response.status_code == 502
    assert '"name": "Offline Cafe"' in store.path.read_text(encoding="utf-8")


def test_landing_page_survives_unwritable_data_dir(tmp_path, notifier, pending):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    client, _ = build_client(make_settings(tmp_path, data_dir=blocker), notifier, pending)

    response = client.get("/")

    assert response.status_code == 200
    assert "Nooti Coffee" in response.text


def test_landing_page_shows_grouped_hours(client):
    client.post(f"/api/telegram?secret={SECRET}", json=update("set hours Sat-Sun closed"))
    client.post(f"/api/telegram?secret={SECRET}", json=update("set note Jazz & cake on Friday"))

    html = client.get("/").text

    assert "Nooti Coffee" in html
    assert "123 Groove St, Helsinki" in html
    assert "Mon–Fri" in html
    assert "08:00 – 18:00" in html
    assert "Sat–Sun" in html
    assert "Closed" in html
    assert "Jazz &amp; cake on Friday" in html


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
