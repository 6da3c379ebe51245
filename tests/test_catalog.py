import json
from datetime import date

import pytest

from barbershop.models import Barber, Service


@pytest.mark.catalog
class TestBarbers:
    def test_create_and_list(self, client, shop, auth_headers):
        response = client.post(
            "/api/barbers",
            json={"name": "Jean", "commissionRate": "40", "workStartTime": "10:00"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        created = json.loads(response.data)
        assert created["commissionRate"] == "40.00"
        assert created["workStartTime"] == "10:00"
        assert created["isActive"] is True

        data = json.loads(client.get("/api/barbers", headers=auth_headers).data)
        assert [b["id"] for b in data] == [created["id"]]

    def test_name_required(self, client, shop, auth_headers):
        response = client.post("/api/barbers", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_active_filter(self, client, db_session, shop, barber, auth_headers):
        db_session.add(Barber(barbershop_id=shop.id, name="Ze", is_active=False))
        db_session.commit()

        data = json.loads(client.get("/api/barbers?active=true", headers=auth_headers).data)
        assert [b["name"] for b in data] == ["Jean"]

    def test_update(self, client, barber, auth_headers):
        response = client.patch(
            f"/api/barbers/{barber.id}",
            json={"isActive": False, "bio": "Especialista em degradê"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["isActive"] is False
        assert data["name"] == "Jean"

    def test_delete(self, client, db_session, barber, auth_headers):
        barber_id = barber.id
        response = client.delete(f"/api/barbers/{barber_id}", headers=auth_headers)

        assert response.status_code == 204
        assert db_session.get(Barber, barber_id) is None

    def test_other_tenant_barber_untouchable(
        self, client, db_session, shop, other_shop, auth_headers
    ):
        foreign = other_shop["barber"]

        patch = client.patch(
            f"/api/barbers/{foreign.id}", json={"name": "Hacked"}, headers=auth_headers
        )
        delete = client.delete(f"/api/barbers/{foreign.id}", headers=auth_headers)

        assert patch.status_code == 404
        assert delete.status_code == 404
        db_session.refresh(foreign)
        assert foreign.name == "Rui"


@pytest.mark.catalog
class TestServices:
    def test_create(self, client, shop, auth_headers):
        response = client.post(
            "/api/services",
            json={"name": "Corte + Barba", "price": "80", "duration": 50, "isCombo": True},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data["price"] == "80.00"
        assert data["duration"] == 50
        assert data["isCombo"] is True

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Corte", "price": "55"},
            {"name": "Corte", "price": "55", "duration": 0},
            {"name": "Corte", "price": "abc", "duration": 30},
            {"name": "Corte", "price": "55", "duration": "half an hour"},
        ],
    )
    def test_invalid_payloads(self, client, shop, auth_headers, payload):
        response = client.post("/api/services", json=payload, headers=auth_headers)
        assert response.status_code == 400

    def test_category_must_belong_to_shop(self, client, shop, auth_headers):
        response = client.post(
            "/api/services",
            json={"name": "Corte", "price": "55", "duration": 30, "categoryId": "nope"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_price_change_keeps_booked_price(
        self, client, barber, service, auth_headers
    ):
        booked = json.loads(
            client.post(
                "/api/appointments",
                json={
                    "barberId": barber.id,
                    "serviceId": service.id,
                    "date": "2024-06-10",
                    "startTime": "09:00",
                },
                headers=auth_headers,
            ).data
        )

        client.patch(
            f"/api/services/{service.id}", json={"price": "65.00"}, headers=auth_headers
        )

        data = json.loads(
            client.get("/api/appointments?date=2024-06-10", headers=auth_headers).data
        )
        assert data[0]["id"] == booked["id"]
        assert data[0]["price"] == "55.00"

    def test_delete(self, client, db_session, service, auth_headers):
        service_id = service.id
        response = client.delete(f"/api/services/{service_id}", headers=auth_headers)

        assert response.status_code == 204
        assert db_session.get(Service, service_id) is None

    def test_other_tenant_service_not_found(self, client, shop, other_shop, auth_headers):
        response = client.patch(
            f"/api/services/{other_shop['service'].id}",
            json={"price": "1.00"},
            headers=auth_headers,
        )
        assert response.status_code == 404


@pytest.mark.catalog
class TestServiceCategories:
    def test_create_and_order(self, client, shop, auth_headers):
        client.post(
            "/api/service-categories",
            json={"name": "Barba", "sortOrder": 2},
            headers=auth_headers,
        )
        created = client.post(
            "/api/service-categories",
            json={"name": "Cabelo", "sortOrder": 1},
            headers=auth_headers,
        )
        assert created.status_code == 201

        data = json.loads(client.get("/api/service-categories", headers=auth_headers).data)
        assert [c["name"] for c in data] == ["Cabelo", "Barba"]

    def test_service_in_category(self, client, shop, auth_headers):
        category = json.loads(
            client.post(
                "/api/service-categories", json={"name": "Cabelo"}, headers=auth_headers
            ).data
        )

        response = client.post(
            "/api/services",
            json={"name": "Corte", "price": "55", "duration": 30, "categoryId": category["id"]},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert json.loads(response.data)["categoryId"] == category["id"]


@pytest.mark.catalog
class TestProducts:
    def test_create_flags_low_stock(self, client, shop, auth_headers):
        response = client.post(
            "/api/products",
            json={"name": "Pomada", "price": "35.90", "stockQuantity": 3},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data["price"] == "35.90"
        assert data["lowStock"] is True

    def test_restock(self, client, shop, auth_headers):
        product = json.loads(
            client.post(
                "/api/products",
                json={"name": "Pomada", "price": "35.90", "stockQuantity": 3},
                headers=auth_headers,
            ).data
        )

        response = client.patch(
            f"/api/products/{product['id']}",
            json={"stockQuantity": 20},
            headers=auth_headers,
        )

        data = json.loads(response.data)
        assert data["stockQuantity"] == 20
        assert data["lowStock"] is False

    def test_negative_stock_rejected(self, client, shop, auth_headers):
        response = client.post(
            "/api/products",
            json={"name": "Pomada", "price": "35.90", "stockQuantity": -1},
            headers=auth_headers,
        )
        assert response.status_code == 400


@pytest.mark.catalog
class TestClients:
    def test_create_and_list_newest_first(self, client, shop, customer, auth_headers):
        response = client.post(
            "/api/clients",
            json={"name": "Bruno", "phone": "11911112222", "birthDate": "1990-04-21"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        created = json.loads(response.data)
        assert created["birthDate"] == "1990-04-21"
        assert created["loyaltyPoints"] == 0
        assert created["totalSpent"] == "0.00"

        data = json.loads(client.get("/api/clients", headers=auth_headers).data)
        assert [c["name"] for c in data] == ["Bruno", "Carlos Lima"]

    def test_update(self, client, customer, auth_headers):
        response = client.patch(
            f"/api/clients/{customer.id}",
            json={"notes": "Prefere máquina 2"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert json.loads(response.data)["notes"] == "Prefere máquina 2"

    def test_bad_birth_date(self, client, customer, auth_headers):
        response = client.patch(
            f"/api/clients/{customer.id}",
            json={"birthDate": "21/04/1990"},
            headers=auth_headers,
        )
        assert response.status_code == 400


@pytest.mark.finance
class TestTransactions:
    def test_create_defaults_to_today(self, client, shop, auth_headers):
        response = client.post(
            "/api/transactions",
            json={"type": "service", "amount": "55.00", "paymentMethod": "pix"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data["date"] == date.today().isoformat()
        assert data["amount"] == "55.00"

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "gift", "amount": "10"},
            {"type": "service", "amount": "0"},
            {"type": "service", "amount": "10", "paymentMethod": "bitcoin"},
            {"type": "service"},
        ],
    )
    def test_invalid(self, client, shop, auth_headers, payload):
        response = client.post("/api/transactions", json=payload, headers=auth_headers)
        assert response.status_code == 400

    def test_reference_to_other_tenant_rejected(
        self, client, shop, other_shop, auth_headers
    ):
        response = client.post(
            "/api/transactions",
            json={"type": "service", "amount": "10", "barberId": other_shop["barber"].id},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_recent_limited_to_ten(self, client, shop, auth_headers):
        for day in range(1, 13):
            client.post(
                "/api/transactions",
                json={"type": "service", "amount": "10", "date": f"2024-06-{day:02d}"},
                headers=auth_headers,
            )

        data = json.loads(client.get("/api/transactions/recent", headers=auth_headers).data)

        assert len(data) == 10
        assert data[0]["date"] == "2024-06-12"
        assert len(json.loads(client.get("/api/transactions", headers=auth_headers).data)) == 12
