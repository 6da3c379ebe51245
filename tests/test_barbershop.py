import json
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from barbershop import storage
from barbershop.models import Barbershop, Review, Service
from barbershop.services.tenancy import default_slug, resolve_tenant


def count_shops(session):
    return session.scalar(select(func.count(Barbershop.id)))


@pytest.mark.barbershop
class TestTenantResolver:
    """Resolve-or-create of the owner's barbershop."""

    def test_first_access_provisions_defaults(self, client, owner, auth_headers):
        response = client.get("/api/barbershop", headers=auth_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["ownerId"] == owner.id
        assert data["name"] == "Teixeira's Barbearia"
        assert data["slug"] == f"barbershop-{owner.id[:8]}"
        assert data["openingTime"] == "09:00"
        assert data["closingTime"] == "19:00"

    def test_owner_without_first_name_gets_generic_name(self, owner_factory):
        user = owner_factory("anon@example.com", first_name=None)
        assert resolve_tenant(user).name == "Minha Barbearia"

    def test_repeated_access_returns_same_barbershop(
        self, client, db_session, auth_headers
    ):
        first = json.loads(client.get("/api/barbershop", headers=auth_headers).data)
        second = json.loads(client.get("/api/barbershop", headers=auth_headers).data)

        assert first["id"] == second["id"]
        assert count_shops(db_session) == 1

    def test_lost_race_returns_winning_row(self, db_session, owner, monkeypatch):
        winner = resolve_tenant(owner)
        winner_id = winner.id

        # The first lookup misses as if the concurrent insert was not visible yet
        real_lookup = storage.get_barbershop_by_owner
        calls = {"n": 0}

        def stale_then_real(owner_id):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real_lookup(owner_id)

        monkeypatch.setattr(storage, "get_barbershop_by_owner", stale_then_real)

        shop = resolve_tenant(owner)

        assert shop.id == winner_id
        assert count_shops(db_session) == 1

    def test_slug_taken_by_other_owner_gets_suffix(self, db_session, owner, owner_factory):
        rival = owner_factory("rival@example.com")
        db_session.add(
            Barbershop(owner_id=rival.id, name="Rival", slug=default_slug(owner.id))
        )
        db_session.commit()

        shop = resolve_tenant(owner)

        assert shop.owner_id == owner.id
        assert shop.slug.startswith(default_slug(owner.id) + "-")
        assert count_shops(db_session) == 2

    def test_requires_token(self, client):
        assert client.get("/api/barbershop").status_code == 401


@pytest.mark.barbershop
class TestBarbershopSettings:
    """PATCH /api/barbershop"""

    def test_update_settings(self, client, shop, auth_headers):
        response = client.patch(
            "/api/barbershop",
            json={
                "name": "Barbearia Teixeira",
                "openingTime": "08:30",
                "workDays": ["tue", "wed", "thu", "fri", "sat"],
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["name"] == "Barbearia Teixeira"
        assert data["openingTime"] == "08:30"
        assert data["workDays"] == ["tue", "wed", "thu", "fri", "sat"]
        assert data["slug"] == "teixeira"

    def test_empty_name_rejected(self, client, shop, auth_headers):
        response = client.patch("/api/barbershop", json={"name": ""}, headers=auth_headers)
        assert response.status_code == 400

    def test_malformed_time_rejected(self, client, shop, auth_headers):
        response = client.patch(
            "/api/barbershop", json={"closingTime": "7pm"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert "closingTime" in json.loads(response.data)["message"]

    def test_slug_in_use_rejected(self, client, shop, other_shop, auth_headers):
        response = client.patch(
            "/api/barbershop",
            json={"slug": other_shop["shop"].slug},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == "Slug already in use"


@pytest.mark.public
class TestPublicBarbershop:
    """Unauthenticated lookups behind the booking link."""

    def test_lookup_by_slug_hides_owner(self, client, shop):
        response = client.get("/api/barbershops/teixeira")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["id"] == shop.id
        assert "ownerId" not in data

    def test_unknown_slug(self, client):
        response = client.get("/api/barbershops/nope")

        assert response.status_code == 404
        assert json.loads(response.data)["message"] == "Barbershop not found"

    def test_only_active_services_listed(self, client, db_session, shop, service):
        db_session.add(
            Service(
                barbershop_id=shop.id,
                name="Luzes",
                price=Decimal("120.00"),
                duration=90,
                is_active=False,
            )
        )
        db_session.commit()

        data = json.loads(client.get("/api/barbershops/teixeira/services").data)

        assert [s["name"] for s in data] == ["Corte"]
        assert data[0]["price"] == "55.00"

    def test_barbers_listed(self, client, barber):
        data = json.loads(client.get("/api/barbershops/teixeira/barbers").data)
        assert [b["name"] for b in data] == ["Jean"]

    def test_public_reviews_and_rating(self, client, db_session, shop, customer):
        db_session.add_all([
            Review(barbershop_id=shop.id, client_id=customer.id, rating=5),
            Review(barbershop_id=shop.id, client_id=customer.id, rating=4),
            Review(barbershop_id=shop.id, client_id=customer.id, rating=1, is_public=False),
        ])
        db_session.commit()

        data = json.loads(client.get("/api/barbershops/teixeira/reviews").data)

        assert data["totalReviews"] == 2
        assert data["averageRating"] == 4.5
        assert all(r["clientName"] == "Carlos Lima" for r in data["reviews"])

    def test_other_tenant_catalog_not_exposed(self, client, shop, other_shop):
        data = json.loads(client.get("/api/barbershops/teixeira/services").data)
        assert data == []
