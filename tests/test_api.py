"""HTTP tests for the FastAPI application."""
import pytest
from fastapi.testclient import TestClient

from apps.api.deps import build_container
from apps.api.main import create_app
from core.config import Settings
from core.utils_datetime import get_today_key
from db.session import create_engine, create_session_factory
from integrations.sms import SmsResult


class RecordingProvider:
    def __init__(self):
        self.sent = []

    async def send(self, phone, text):
        self.sent.append((phone, text))
        return SmsResult(success=True)


@pytest.fixture
def api_settings(tmp_path):
    return Settings(cache_dir=str(tmp_path / "cache"), admin_api_token="")


@pytest.fixture
def make_client(tmp_path):
    clients = []

    def _make(config):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
        provider = RecordingProvider()
        services = build_container(
            create_session_factory(engine),
            config=config,
            sms_provider=provider,
            watch_storage=False,
        )
        client = TestClient(create_app(services=services, bind=engine))
        client.__enter__()
        clients.append(client)
        return client, services, provider

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, api_settings):
    return make_client(api_settings)


def _payload(**overrides):
    data = {
        "pet_name": "초코",
        "owner_name": "김민수",
        "service": "grooming",
        "phone": "010-1234-5678",
        "reservation_date": get_today_key(540),
        "reservation_time": "14:00",
    }
    data.update(overrides)
    return data


def _submit(http, **overrides):
    response = http.post("/api/v1/reservations", json=_payload(**overrides))
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
class TestPublicEndpoints:

    def test_root_and_health(self, client):
        http, _, _ = client

        assert http.get("/").json()["status"] == "running"
        health = http.get("/health").json()
        assert health["status"] == "healthy"
        assert health["realtime_subscribers"] == 1

    def test_submission_is_always_pending(self, client):
        http, services, _ = client

        created = _submit(http, status="confirmed")

        assert created["status"] == "pending"
        assert created["petName"] == "초코"
        assert [r.id for r in services.cache.read_all()] == [created["id"]]

    def test_invalid_submission_is_rejected(self, client):
        http, _, _ = client

        response = http.post("/api/v1/reservations", json=_payload(pet_name=""))

        assert response.status_code == 422


@pytest.mark.integration
class TestAdminEndpoints:

    def test_list_and_today(self, client):
        http, _, _ = client
        first = _submit(http, service="daycare", reservation_time=None)
        second = _submit(http, service="hotel", check_in=get_today_key(540))

        listed = http.get("/api/v1/admin/reservations").json()
        today = http.get("/api/v1/admin/reservations/today").json()

        assert {r["id"] for r in listed} == {first["id"], second["id"]}
        assert today["total"] == 2
        assert [r["id"] for r in today["reservations"]["hotel"]] == [second["id"]]
        assert today["reservations"]["daycare"][0]["time"] == "미정"

    def test_confirm_sends_sms(self, client):
        http, _, provider = client
        created = _submit(http)

        response = http.post(f"/api/v1/admin/reservations/{created['id']}/confirm")

        assert response.status_code == 200
        assert response.json()["reservation"]["status"] == "confirmed"
        assert provider.sent[0][0] == "01012345678"

    def test_status_change_and_cancel(self, client):
        http, services, _ = client
        created = _submit(http)

        completed = http.post(
            f"/api/v1/admin/reservations/{created['id']}/status", json={"status": "completed"}
        )
        cancelled = http.post(f"/api/v1/admin/reservations/{created['id']}/cancel")

        assert completed.json()["reservation"]["status"] == "completed"
        assert cancelled.json()["reservation"]["status"] == "cancelled"
        assert services.cache.read_all() == []

    @pytest.mark.parametrize("status", ["deleted", "archived"])
    def test_invalid_status_is_422(self, client, status):
        http, _, _ = client
        created = _submit(http)

        response = http.post(
            f"/api/v1/admin/reservations/{created['id']}/status", json={"status": status}
        )

        assert response.status_code == 422

    def test_missing_reservation_is_502(self, client):
        http, _, _ = client

        response = http.post("/api/v1/admin/reservations/missing/confirm")

        assert response.status_code == 502
        assert "not found" in response.json()["detail"]

    def test_delete_and_bulk_delete(self, client):
        http, services, _ = client
        ids = [_submit(http)["id"] for _ in range(3)]

        single = http.delete(f"/api/v1/admin/reservations/{ids[0]}")
        bulk = http.post("/api/v1/admin/reservations/bulk-delete", json={"ids": ids[1:]})

        assert single.status_code == 200
        assert bulk.json()["deleted"] == 2
        assert http.get("/api/v1/admin/reservations").json() == []
        assert services.cache.read_all() == []

    def test_bulk_delete_requires_ids(self, client):
        http, _, _ = client

        response = http.post("/api/v1/admin/reservations/bulk-delete", json={"ids": []})

        assert response.status_code == 422

    def test_stats(self, client):
        http, _, _ = client
        _submit(http)
        _submit(http, service="hotel")

        stats = http.get("/api/v1/admin/stats").json()

        assert stats["total"] == 2
        assert stats["today"] == 2
        assert stats["pending"] == 2

    def test_admin_token_required_when_configured(self, make_client, tmp_path):
        http, _, _ = make_client(
            Settings(cache_dir=str(tmp_path / "cache"), admin_api_token="s3cret")
        )

        assert http.get("/api/v1/admin/reservations").status_code == 401
        authorized = http.get(
            "/api/v1/admin/reservations", headers={"X-Admin-Token": "s3cret"}
        )
        assert authorized.status_code == 200


@pytest.mark.integration
class TestChatbotEndpoints:

    def test_status_summary(self, client):
        http, _, _ = client

        response = http.get("/api/v1/chatbot/status", params={"date": "2025-03-04"})

        assert response.json()["summary"]["daycare"] == {"available": 15, "booked": 0}

    def test_creation_refused(self, client):
        http, _, _ = client

        response = http.post("/api/v1/chatbot/reservations/grooming", json={"petName": "초코"})

        assert response.json()["success"] is False
        assert "예약폼" in response.json()["error"]
