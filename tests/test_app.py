"""Application-level behaviour: health, request context headers, error shape."""

from fastapi.testclient import TestClient

from saas_suite.database import get_db
from saas_suite.main import app, create_app
from saas_suite.models import HotelRoom


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["environment"] == "test"


class TestRequestContext:
    def test_correlation_and_timing_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Correlation-ID"].startswith("req_")
        assert float(response.headers["X-Process-Time"]) >= 0
        assert "X-Tenant-ID" not in response.headers

    def test_inbound_correlation_id_is_reused(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "lb-4f2a.91"})
        assert response.headers["X-Correlation-ID"] == "lb-4f2a.91"

    def test_unsafe_correlation_id_is_replaced(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "bad id with spaces"})
        assert response.headers["X-Correlation-ID"].startswith("req_")

    def test_tenant_header_on_tenant_requests(self, client, seed, auth):
        response = client.get("/api/hotel/rooms", headers=auth(seed.owner_a))

        assert response.status_code == 200
        assert response.headers["X-Tenant-ID"] == seed.tenant_a.id

    def test_super_admin_can_act_as_tenant(self, client, db, seed, auth):
        db.add(HotelRoom(tenant_id=seed.tenant_a.id, room_number="701", base_price=1))
        db.commit()

        response = client.get(
            "/api/hotel/rooms",
            headers=auth(seed.super_admin, **{"X-Tenant-ID": seed.tenant_a.id}),
        )

        assert [r["room_number"] for r in response.json()] == ["701"]
        assert response.headers["X-Tenant-ID"] == seed.tenant_a.id

    def test_tenant_header_ignored_for_regular_users(self, client, db, seed, auth):
        db.add(HotelRoom(tenant_id=seed.tenant_a.id, room_number="701", base_price=1))
        db.commit()

        response = client.get(
            "/api/hotel/rooms",
            headers=auth(seed.owner_b, **{"X-Tenant-ID": seed.tenant_a.id}),
        )

        assert response.json() == []
        assert response.headers["X-Tenant-ID"] == seed.tenant_b.id


class TestUnauthenticated:
    def test_no_database_access_before_authentication(self, client):
        opened = []

        def recording_get_db():
            opened.append(True)
            yield None

        app.dependency_overrides[get_db] = recording_get_db

        for method, path in (
            ("GET", "/api/hotel/rooms"),
            ("POST", "/api/brewery/inventory/purchase"),
            ("DELETE", "/api/store/products/abc"),
            ("GET", "/api/beauty/services"),
        ):
            response = client.request(method, path)
            assert response.status_code == 401, path

        assert opened == []

    def test_garbage_token_is_401(self, client):
        response = client.get("/api/restaurant/tables", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["type"] == "authentication_error"


class TestErrorShape:
    def test_not_found_body(self, client, seed, auth):
        response = client.get("/api/hotel/reservations/missing", headers=auth(seed.owner_a))

        assert response.status_code == 404
        body = response.json()
        assert body["type"] == "not_found"
        assert body["detail"] == "Reservation not found: missing"
        assert body["correlation_id"] == response.headers["X-Correlation-ID"]

    def test_validation_errors_are_400(self, client, seed, auth):
        response = client.post("/api/hotel/rooms", headers=auth(seed.owner_a), json={"room_number": "1"})

        assert response.status_code == 400
        body = response.json()
        assert body["type"] == "validation_error"
        assert body["detail"].startswith("base_price:")

    def test_unhandled_errors_are_generic_500(self):
        failing_app = create_app()

        @failing_app.get("/boom")
        async def boom():
            raise RuntimeError("database password is hunter2")

        response = TestClient(failing_app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == "Internal server error"
        assert body["type"] == "internal_error"
        assert "correlation_id" in body
