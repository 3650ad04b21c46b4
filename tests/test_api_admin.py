"""API tests for the super-admin organization console."""

import pytest

from saas_suite.models import Tenant, User


@pytest.fixture
def root(seed, auth):
    return auth(seed.super_admin)


NEW_ORG = {
    "name": "Delta Salon",
    "slug": "delta-salon",
    "vertical": "beauty",
    "owner_email": "Owner@DeltaSalon.com",
    "owner_password": "salon-owner-pass",
    "owner_name": "Dee Delta",
}


class TestAccess:
    def test_tenant_owner_is_forbidden(self, client, seed, auth):
        response = client.get("/api/admin/organizations", headers=auth(seed.owner_a))

        assert response.status_code == 403
        assert response.json()["detail"] == "Super admin privileges required"

    def test_anonymous_is_401(self, client):
        assert client.get("/api/admin/organizations").status_code == 401


class TestOrganizations:
    def test_list_sees_every_tenant(self, client, root, seed):
        body = client.get("/api/admin/organizations", headers=root).json()

        assert body["total"] == 3
        counts = {org["slug"]: org["user_count"] for org in body["organizations"]}
        assert counts == {"alpha-hotel": 3, "bravo-hotel": 2, "copper-kettle": 1}

    def test_list_filters(self, client, root):
        def slugs(**params):
            response = client.get("/api/admin/organizations", headers=root, params=params)
            return sorted(org["slug"] for org in response.json()["organizations"])

        assert slugs(vertical="brewery") == ["copper-kettle"]
        assert slugs(search="bravo") == ["bravo-hotel"]
        assert slugs(search="1001") == ["alpha-hotel"]
        assert slugs(status="inactive") == []

    def test_create_with_owner(self, client, root, db):
        response = client.post("/api/admin/organizations", headers=root, json=NEW_ORG)

        assert response.status_code == 201
        body = response.json()
        assert body["user_count"] == 1
        assert body["code"].isdigit() and len(body["code"]) == 4
        assert body["contact_email"] == "owner@deltasalon.com"

        owner = db.query(User).filter(User.tenant_id == body["id"]).one()
        assert owner.email == "owner@deltasalon.com"
        assert owner.role == "owner"

        login = client.post("/api/auth/login", json={
            "tenant": body["code"], "email": "owner@deltasalon.com", "password": "salon-owner-pass",
        })
        assert login.status_code == 200

    def test_duplicate_slug(self, client, root):
        response = client.post("/api/admin/organizations", headers=root, json={**NEW_ORG, "slug": "alpha-hotel"})

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_SLUG"

    def test_short_password_rejected(self, client, root):
        response = client.post("/api/admin/organizations", headers=root, json={**NEW_ORG, "owner_password": "short"})
        assert response.status_code == 400

    def test_deactivate(self, client, root, seed, db):
        response = client.patch(f"/api/admin/organizations/{seed.tenant_a.id}", headers=root, json={"is_active": False})

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        db.expire_all()
        assert db.get(Tenant, seed.tenant_a.id).is_active is False

        inactive = client.get("/api/admin/organizations", headers=root, params={"status": "inactive"}).json()
        assert [org["slug"] for org in inactive["organizations"]] == ["alpha-hotel"]

    def test_deactivated_tenant_cannot_log_in(self, client, root, seed):
        client.patch(f"/api/admin/organizations/{seed.tenant_a.id}", headers=root, json={"is_active": False})

        response = client.post("/api/auth/login", json={
            "tenant": "1001", "email": "owner@alphahotel.com", "password": "correct-horse-battery",
        })

        assert response.status_code == 401

    def test_empty_patch(self, client, root, seed):
        response = client.patch(f"/api/admin/organizations/{seed.tenant_a.id}", headers=root, json={})
        assert response.status_code == 400

    def test_unknown_organization(self, client, root):
        response = client.patch("/api/admin/organizations/missing", headers=root, json={"name": "Nope"})
        assert response.status_code == 404
