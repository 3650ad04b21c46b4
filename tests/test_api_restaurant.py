"""API tests for restaurant tables and reservations."""

import pytest

from saas_suite.api.endpoints.restaurant import snap_duration


@pytest.fixture
def owner(seed, auth):
    return auth(seed.owner_a)


@pytest.fixture
def table(client, owner):
    response = client.post("/api/restaurant/tables", headers=owner, json={"number": "T1", "seats": 4, "zone": "terrace"})
    assert response.status_code == 201
    return response.json()


def reserve(client, headers, time, table_id=None, **extra):
    payload = {
        "guest_name": extra.pop("guest_name", "Ada Lovelace"),
        "guest_count": 2,
        "date": "2024-06-01",
        "time": time,
        "table_id": table_id,
        **extra,
    }
    return client.post("/api/restaurant/reservations", headers=headers, json=payload)


@pytest.mark.parametrize("duration,expected", [
    (60, 60), (90, 90), (180, 180), (100, 120), (240, 120), (None, 120),
])
def test_snap_duration(duration, expected):
    assert snap_duration(duration) == expected


class TestTables:
    def test_create_and_list(self, client, owner, table):
        response = client.get("/api/restaurant/tables", headers=owner)
        assert [(t["number"], t["seats"], t["zone"]) for t in response.json()] == [("T1", 4, "terrace")]

    def test_duplicate_number(self, client, owner, table):
        response = client.post("/api/restaurant/tables", headers=owner, json={"number": "T1"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_TABLE"


class TestReservations:
    def test_date_is_required(self, client, owner):
        response = client.get("/api/restaurant/reservations", headers=owner)

        assert response.status_code == 400
        assert response.json()["detail"] == "Query parameter 'date' is required"

    def test_odd_duration_is_snapped(self, client, owner, table):
        response = reserve(client, owner, "19:00", table["id"], duration=100)

        assert response.status_code == 201
        body = response.json()
        assert body["duration"] == 120
        assert body["status"] == "CONFIRMED"
        assert body["table_number"] == "T1"

    def test_overlapping_slot_is_rejected(self, client, owner, table):
        reserve(client, owner, "19:00", table["id"], duration=120)

        response = reserve(client, owner, "20:30", table["id"], guest_name="Grace Hopper")

        assert response.status_code == 400
        assert "19:00" in response.json()["detail"]

    def test_adjacent_slot_is_fine(self, client, owner, table):
        reserve(client, owner, "19:00", table["id"], duration=90)

        response = reserve(client, owner, "20:30", table["id"])

        assert response.status_code == 201

    def test_cancelled_reservation_frees_table(self, client, owner, table):
        first = reserve(client, owner, "19:00", table["id"]).json()

        cancelled = client.post(f"/api/restaurant/reservations/{first['id']}/cancel", headers=owner)
        assert cancelled.json()["status"] == "CANCELLED"

        assert reserve(client, owner, "19:30", table["id"]).status_code == 201

    def test_reservation_without_table(self, client, owner):
        response = reserve(client, owner, "12:00")

        assert response.status_code == 201
        assert response.json()["table_id"] is None

    def test_table_of_other_tenant_is_404(self, client, table, seed, auth):
        response = reserve(client, auth(seed.owner_b), "19:00", table["id"])
        assert response.status_code == 404

    def test_list_for_day_in_time_order(self, client, owner, table):
        reserve(client, owner, "21:00", table["id"], guest_name="Late")
        reserve(client, owner, "12:00", guest_name="Early")
        reserve(client, owner, "13:00", guest_name="Other day", date="2024-06-02")

        response = client.get("/api/restaurant/reservations", headers=owner, params={"date": "2024-06-01"})

        assert [r["guest_name"] for r in response.json()] == ["Early", "Late"]

    def test_list_by_status(self, client, owner, table):
        first = reserve(client, owner, "12:00").json()
        reserve(client, owner, "14:00")
        client.post(f"/api/restaurant/reservations/{first['id']}/cancel", headers=owner)

        response = client.get("/api/restaurant/reservations", headers=owner, params={
            "date": "2024-06-01", "status": "CANCELLED",
        })

        assert [r["id"] for r in response.json()] == [first["id"]]

    def test_cancel_other_tenant_is_404(self, client, owner, seed, auth):
        reservation = reserve(client, owner, "12:00").json()

        response = client.post(
            f"/api/restaurant/reservations/{reservation['id']}/cancel",
            headers=auth(seed.owner_b),
        )

        assert response.status_code == 404

    def test_time_with_utc_offset_is_rejected(self, client, owner, table):
        reserve(client, owner, "19:00", table["id"])

        response = reserve(client, owner, "19:30+02:00", table["id"])

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"
        assert "UTC offset" in response.json()["detail"]

    def test_search_by_name_or_phone(self, client, owner):
        reserve(client, owner, "12:00", guest_name="Ada Lovelace", guest_phone="+44 20 7946 0001")
        reserve(client, owner, "13:00", guest_name="Grace Hopper", guest_phone="+1 555 0100")

        def names(search):
            response = client.get("/api/restaurant/reservations", headers=owner, params={
                "date": "2024-06-01", "search": search,
            })
            return [r["guest_name"] for r in response.json()]

        assert names("grace") == ["Grace Hopper"]
        assert names("7946") == ["Ada Lovelace"]
        assert names("nobody") == []
